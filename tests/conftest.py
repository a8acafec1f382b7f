"""Shared fixtures: a dispatcher over a small in-memory catalog."""

from __future__ import annotations

from typing import Any

import pytest

from toolserver.protocol.dispatcher import MethodDispatcher
from toolserver.protocol.models import InitializeResult, ServerInfo, ToolDescriptor
from toolserver.tools.registry import Tool, ToolRegistry


def echo(arguments: dict[str, Any]) -> str:
    return f"echo:{arguments['text']}:{arguments['times']}"


def explode(arguments: dict[str, Any]) -> str:
    msg = "backend unavailable"
    raise RuntimeError(msg)


ECHO = ToolDescriptor(
    name="echo",
    description="Echo text back.",
    input_schema={
        "type": "object",
        "properties": {
            "text": {"type": "string", "description": "Text to echo"},
            "times": {"type": "number", "description": "Repeat count", "default": 1},
        },
        "required": ["text"],
    },
)

EXPLODE = ToolDescriptor(
    name="explode",
    description="Always fails.",
    input_schema={"type": "object", "properties": {}, "required": []},
)


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry([
        Tool(descriptor=ECHO, executor=echo),
        Tool(descriptor=EXPLODE, executor=explode),
    ])


@pytest.fixture
def initialize_result() -> InitializeResult:
    return InitializeResult(
        capabilities={"tools": {"listChanged": True}},
        server_info=ServerInfo(name="test-server", version="9.9.9"),
    )


@pytest.fixture
def dispatcher(registry: ToolRegistry, initialize_result: InitializeResult) -> MethodDispatcher:
    return MethodDispatcher(registry, initialize_result)
