"""Tool layer — registry, argument validation, invocation, built-in catalogs."""

from toolserver.tools.invoker import ToolInvoker
from toolserver.tools.registry import Tool, ToolExecutor, ToolRegistry

__all__ = [
    "Tool",
    "ToolExecutor",
    "ToolInvoker",
    "ToolRegistry",
]
