"""MethodDispatcher — routes decoded requests to the fixed MCP method set."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from toolserver.protocol.codec import decode
from toolserver.protocol.errors import DecodeError, InvalidParamsError
from toolserver.protocol.models import InitializeResult, JsonRpcRequest, JsonRpcResponse
from toolserver.tools.invoker import ToolInvoker
from toolserver.utils.telemetry import (
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_RPC_NOTIFICATION,
    get_tracer,
)

if TYPE_CHECKING:
    from toolserver.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


class Method(str, Enum):
    """The JSON-RPC methods this server understands."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    INITIALIZED = "notifications/initialized"

    @classmethod
    def parse(cls, value: str) -> Method | None:
        """Return the matching member, or ``None`` for an unrecognized method."""
        try:
            return cls(value)
        except ValueError:
            return None


class MethodDispatcher:
    """State-free router from a request envelope to a response envelope.

    Usage::

        dispatcher = MethodDispatcher(registry, initialize_result)
        response = await dispatcher.dispatch(request)   # None for notifications

    A request without an ``id`` key is a notification: it is processed but
    never answered, unless its method is unknown, which is always reported
    with ``id = null``.  Every other request gets exactly one response, and no
    exception raised while building it escapes :meth:`dispatch`.
    """

    def __init__(self, registry: ToolRegistry, initialize_result: InitializeResult) -> None:
        self._registry = registry
        self._initialize_result = initialize_result
        self._invoker = ToolInvoker(registry)

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        """Route *request* by method and build its response."""
        method = Method.parse(request.method)
        with _tracer.start_as_current_span("rpc.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            span.set_attribute(ATTR_RPC_ID, str(request.id))
            span.set_attribute(ATTR_RPC_NOTIFICATION, request.is_notification)

            if method is None:
                # answered even without an id key, with id = null
                logger.warning("Unknown method %r (id=%r)", request.method, request.id)
                return JsonRpcResponse.failure(request.id, f"Unknown method: {request.method}")

            try:
                result = await self._handle(method, request)
            except InvalidParamsError as exc:
                logger.warning("%s", exc)
                response = JsonRpcResponse.failure(request.id, str(exc))
            except Exception as exc:
                logger.exception("Handler for %s failed", request.method)
                response = JsonRpcResponse.failure(request.id, str(exc) or type(exc).__name__)
            else:
                response = JsonRpcResponse.success(request.id, result)

            if request.is_notification:
                return None
            return response

    async def handle_raw(self, raw: str | bytes) -> JsonRpcResponse | None:
        """Decode and dispatch one raw message.

        Undecodable input becomes an error envelope with ``id = null``.
        """
        try:
            request = decode(raw)
        except DecodeError as exc:
            logger.warning("%s", exc)
            return JsonRpcResponse.failure(None, str(exc))
        return await self.dispatch(request)

    async def _handle(self, method: Method, request: JsonRpcRequest) -> Any:
        if method is Method.INITIALIZE:
            return self._initialize_result.to_wire()
        if method is Method.TOOLS_LIST:
            return {"tools": self._registry.descriptors()}
        if method is Method.TOOLS_CALL:
            params = request.params if request.params is not None else {}
            if not isinstance(params, dict):
                raise InvalidParamsError(method.value, "params must be an object")
            return await self._invoker.call(params)
        return {"status": "initialized"}
