"""Server assembly — wire settings, catalog, dispatcher and transport together."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from toolserver.protocol.dispatcher import MethodDispatcher
from toolserver.tools.catalogs import stdio_catalog, websocket_catalog
from toolserver.transports.stdio import StdioServer
from toolserver.transports.websocket import WebSocketServer
from toolserver.utils.telemetry import configure_telemetry

if TYPE_CHECKING:
    from toolserver.config import ServerSettings, TransportName
    from toolserver.tools.registry import ToolExecutor, ToolRegistry

logger = logging.getLogger(__name__)


def build_registry(
    settings: ServerSettings,
    transport: TransportName,
    overrides: Mapping[str, ToolExecutor] | None = None,
) -> ToolRegistry:
    """Return the fixed tool catalog for *transport*."""
    if transport == "stdio":
        return stdio_catalog(overrides)
    return websocket_catalog(overrides, http_timeout=settings.http_timeout)


def build_dispatcher(
    settings: ServerSettings,
    transport: TransportName,
    overrides: Mapping[str, ToolExecutor] | None = None,
) -> MethodDispatcher:
    """Build a dispatcher over *transport*'s catalog and ``initialize`` payload."""
    registry = build_registry(settings, transport, overrides)
    return MethodDispatcher(registry, settings.initialize_result(transport))


def build_stdio_server(
    settings: ServerSettings,
    overrides: Mapping[str, ToolExecutor] | None = None,
) -> StdioServer:
    return StdioServer(build_dispatcher(settings, "stdio", overrides), ordered=settings.ordered)


def build_websocket_server(
    settings: ServerSettings,
    overrides: Mapping[str, ToolExecutor] | None = None,
) -> WebSocketServer:
    return WebSocketServer(
        build_dispatcher(settings, "websocket", overrides),
        host=settings.host,
        port=settings.port,
        path=settings.path or None,
    )


def setup_telemetry(settings: ServerSettings, transport: TransportName) -> None:
    """Configure tracing when the settings ask for it."""
    if not settings.telemetry.enabled:
        return
    configure_telemetry(
        service_name=f"toolserver-{transport}",
        otlp_endpoint=settings.telemetry.otlp_endpoint,
    )
    logger.info("Telemetry enabled for %s transport", transport)
