"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def print_tools_table(tools: list[dict[str, Any]], *, title: str = "Tools") -> None:
    """Pretty-print ``tools/list`` descriptors as a table."""
    table = Table(title=title)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Arguments")

    for tool in tools:
        schema = tool.get("inputSchema", {})
        table.add_row(
            tool.get("name", "?"),
            _truncate(tool.get("description", "")),
            _format_arguments(schema),
        )

    console.print(table)


def print_tools_json(tools: list[dict[str, Any]]) -> None:
    console.print_json(json.dumps({"tools": tools}, ensure_ascii=False))


def _format_arguments(schema: dict[str, Any]) -> str:
    required = set(schema.get("required", []))
    parts: list[str] = []
    for name, prop in schema.get("properties", {}).items():
        label = f"{name}: {prop.get('type', 'any')}"
        if name not in required:
            label += "?"
            if "default" in prop:
                label += f" = {prop['default']!r}"
        parts.append(label)
    return ", ".join(parts) or "-"


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
