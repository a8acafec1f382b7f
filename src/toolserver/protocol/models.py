"""Protocol models — JSON-RPC 2.0 envelopes and MCP payloads.

Implements the message format used by the Model Context Protocol for
the handshake (``initialize``), tool discovery (``tools/list``) and
execution (``tools/call``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

SERVER_ERROR = -32000
"""The single generic code used for every application-level JSON-RPC error."""

DEFAULT_PROTOCOL_VERSION = "2024-11-05"

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A decoded JSON-RPC 2.0 request message.

    ``id`` is optional; whether the key was sent at all (as opposed to sent
    as ``null``) is what separates a notification from a request.
    """

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = "2.0"
    method: str
    id: int | str | None = None
    params: Any = None

    @property
    def is_notification(self) -> bool:
        """``True`` when the caller sent no ``id`` key and expects no reply."""
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int = SERVER_ERROR
    message: str


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message carrying exactly one of result / error."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _one_of_result_or_error(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "response must carry exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, request_id: int | str | None, result: Any) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls,
        request_id: int | str | None,
        message: str,
        code: int = SERVER_ERROR,
    ) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message))

    def to_wire(self) -> dict[str, Any]:
        """Return the on-the-wire mapping; ``id`` is always present."""
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            wire["error"] = self.error.model_dump()
        else:
            wire["result"] = self.result
        return wire


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ToolDescriptor(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ServerInfo(BaseModel):
    """``serverInfo`` block of the ``initialize`` result."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = "1.0.0"


class InitializeResult(BaseModel):
    """Fixed capability/version descriptor returned by ``initialize``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    protocol_version: str = Field(default=DEFAULT_PROTOCOL_VERSION, alias="protocolVersion")
    capabilities: dict[str, Any] = Field(default_factory=dict)
    server_info: ServerInfo = Field(alias="serverInfo")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
