"""``toolserver serve`` — run the MCP server on stdio or WebSocket."""

from __future__ import annotations

import asyncio
import io
import logging
import sys
from pathlib import Path
from typing import Any

import click

from toolserver.cli_commands._output import err_console
from toolserver.config import ServerSettings, load_settings
from toolserver.protocol.errors import ConfigError
from toolserver.utils.log import LOG_LEVELS, configure_logging

logger = logging.getLogger(__name__)

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file.",
)
_log_level_option = click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level for stderr output (overrides the config file).",
)


@click.group()
def serve() -> None:
    """Run the MCP server."""


@serve.command("stdio")
@_config_option
@click.option(
    "--ordered/--unordered",
    default=None,
    help="Write responses in input order (default: completion order).",
)
@_log_level_option
def stdio(config_path: Path | None, ordered: bool | None, log_level: str | None) -> None:
    """Serve line-delimited JSON-RPC on stdin/stdout."""
    from toolserver.app import build_stdio_server, setup_telemetry

    settings = _load_settings(config_path, ordered=ordered, log_level=log_level)
    configure_logging(settings.log_level)
    setup_telemetry(settings, "stdio")
    _use_utf8_stdio()

    server = build_stdio_server(settings)
    _run(server.serve())


@serve.command("websocket")
@_config_option
@click.option("--host", default=None, help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to bind.")
@_log_level_option
def websocket(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
) -> None:
    """Serve JSON-RPC over WebSocket sessions."""
    from toolserver.app import build_websocket_server, setup_telemetry

    settings = _load_settings(config_path, host=host, port=port, log_level=log_level)
    configure_logging(settings.log_level)
    setup_telemetry(settings, "websocket")

    server = build_websocket_server(settings)
    _run(server.serve())


def _load_settings(config_path: Path | None, **overrides: Any) -> ServerSettings:
    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        raise SystemExit(1) from exc
    updates = {key: value for key, value in overrides.items() if value is not None}
    return settings.model_copy(update=updates)


def _use_utf8_stdio() -> None:
    # stdin is read as bytes by StdioServer; only the response stream needs it.
    if isinstance(sys.stdout, io.TextIOWrapper):
        sys.stdout.reconfigure(encoding="utf-8")


def _run(coro: Any) -> None:
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
