"""toolserver CLI entrypoint."""

from __future__ import annotations

import click

from toolserver import __version__


@click.group()
@click.version_option(version=__version__, prog_name="toolserver")
def main() -> None:
    """toolserver — MCP tool server over stdio and WebSocket."""


# Register subcommands
from toolserver.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
