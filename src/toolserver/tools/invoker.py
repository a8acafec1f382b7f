"""ToolInvoker — resolves, validates, and runs one ``tools/call`` request.

Tool-level failures never become JSON-RPC errors: they are folded into the
regular MCP result shape with ``isError: true`` so the caller can tell a
failed tool apart from a broken protocol exchange.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from toolserver.protocol.errors import (
    InvalidArgumentError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
)
from toolserver.tools.schema import validate_arguments
from toolserver.utils.telemetry import ATTR_TOOL_IS_ERROR, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from toolserver.tools.registry import Tool, ToolRegistry

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)

ERROR_PREFIX = "Error: "


def text_result(text: str, *, is_error: bool = False) -> dict[str, Any]:
    """Build the MCP ``tools/call`` result shape around *text*."""
    return {
        "content": [{"type": "text", "text": text}],
        "isError": is_error,
    }


class ToolInvoker:
    """Runs tools from a :class:`ToolRegistry` on behalf of the dispatcher.

    Executors are plain synchronous callables; each call is pushed to a
    worker thread so a slow tool only holds up the task that asked for it.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    async def call(self, params: dict[str, Any]) -> dict[str, Any]:
        """Execute the tool named in *params* and wrap the outcome."""
        name = params.get("name")
        with _tracer.start_as_current_span("tool.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, str(name))
            try:
                tool = self._resolve(name)
                arguments = self._arguments(tool, params.get("arguments"))
                text = await self._execute(tool, arguments)
            except ToolError as exc:
                logger.warning("Tool call %s failed: %s", name, exc)
                span.set_attribute(ATTR_TOOL_IS_ERROR, True)
                return text_result(f"{ERROR_PREFIX}{exc}", is_error=True)

            logger.debug("Tool call %s succeeded", name)
            span.set_attribute(ATTR_TOOL_IS_ERROR, False)
            return text_result(text)

    def _resolve(self, name: Any) -> Tool:
        if not isinstance(name, str) or not name:
            raise ToolNotFoundError(str(name) if name is not None else "(missing name)")
        tool = self._registry.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    @staticmethod
    def _arguments(tool: Tool, raw: Any) -> dict[str, Any]:
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise InvalidArgumentError(tool.name, "arguments", "object")
        return validate_arguments(tool.name, tool.descriptor.input_schema, raw)

    @staticmethod
    async def _execute(tool: Tool, arguments: dict[str, Any]) -> str:
        try:
            result = await asyncio.to_thread(tool.executor, arguments)
        except ToolError:
            raise
        except Exception as exc:
            raise ToolExecutionError(tool.name, str(exc) or type(exc).__name__) from exc
        return result if isinstance(result, str) else str(result)
