"""Envelope codec — raw text in, request models out; response models in, text out."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from toolserver.protocol.errors import DecodeError, EncodeError
from toolserver.protocol.models import JsonRpcRequest, JsonRpcResponse


def decode(raw: str | bytes) -> JsonRpcRequest:
    """Decode one JSON-RPC request.

    Raises:
        DecodeError: If *raw* is not UTF-8 JSON, not an object, or has no
            string ``method``.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("message is not valid UTF-8") from exc

    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"malformed JSON ({exc.msg})") from exc

    if not isinstance(data, dict):
        raise DecodeError("message must be a JSON object")
    if "method" not in data:
        raise DecodeError("missing 'method' field")
    if not isinstance(data["method"], str):
        raise DecodeError("'method' must be a string")

    try:
        return JsonRpcRequest.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(_first_error(exc)) from exc


def encode(response: JsonRpcResponse) -> str:
    """Serialize *response* as one compact JSON document (no trailing newline).

    Raises:
        EncodeError: If the payload holds something JSON cannot represent.
    """
    try:
        return json.dumps(response.to_wire(), ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise EncodeError(str(exc)) from exc


def error_envelope(message: str, request_id: int | str | None = None) -> str:
    """Encode a ``-32000`` error envelope; used for transport-level failures."""
    return encode(JsonRpcResponse.failure(request_id, message))


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid value')}" if loc else str(first.get("msg"))
