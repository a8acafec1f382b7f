"""``toolserver tools`` — inspect the built-in tool catalogs."""

from __future__ import annotations

import click

from toolserver.cli_commands._output import print_tools_json, print_tools_table


@click.group()
def tools() -> None:
    """Inspect the tools each transport exposes."""


@tools.command("list")
@click.option(
    "--transport",
    type=click.Choice(["stdio", "websocket"]),
    default="stdio",
    help="Which transport's catalog to show.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list payload as JSON.")
def list_tools(transport: str, as_json: bool) -> None:
    """List the tools served on TRANSPORT, in declaration order."""
    from toolserver.app import build_registry
    from toolserver.config import ServerSettings

    registry = build_registry(ServerSettings(), "stdio" if transport == "stdio" else "websocket")
    descriptors = registry.descriptors()

    if as_json:
        print_tools_json(descriptors)
        return
    print_tools_table(descriptors, title=f"{transport} tools")
