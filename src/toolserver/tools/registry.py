"""ToolRegistry — the fixed, ordered catalog of tools a server exposes."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict

from toolserver.protocol.models import ToolDescriptor

ToolExecutor = Callable[[dict[str, Any]], str]
"""Runs a tool with validated arguments and returns its text result."""


class Tool(BaseModel):
    """A tool descriptor paired with the callable that executes it."""

    model_config = ConfigDict(frozen=True)

    descriptor: ToolDescriptor
    executor: ToolExecutor

    @property
    def name(self) -> str:
        return self.descriptor.name


class ToolRegistry:
    """Maps tool names to :class:`Tool` entries, in declaration order.

    The registry is built once at startup and never mutated afterwards, so
    it is shared across transports and sessions without locking.

    Usage::

        registry = ToolRegistry([get_user_info, database_query])
        registry.descriptors()        # tools/list payload
        registry.get("database_query")
    """

    def __init__(self, tools: Iterable[Tool]) -> None:
        entries: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in entries:
                msg = f"Duplicate tool name: {tool.name}"
                raise ValueError(msg)
            entries[tool.name] = tool
        self._tools = entries

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def descriptors(self) -> list[dict[str, Any]]:
        """Return the full catalog as wire dicts, fresh on every call."""
        return [tool.descriptor.to_wire() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
