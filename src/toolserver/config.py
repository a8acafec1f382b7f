"""Server settings — defaults, YAML loading, and per-transport identity."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from toolserver.protocol.errors import ConfigError
from toolserver.protocol.models import DEFAULT_PROTOCOL_VERSION, InitializeResult, ServerInfo

TransportName = Literal["stdio", "websocket"]

STDIO_SERVER_NAME = "MCP Tool Server"
WEBSOCKET_SERVER_NAME = "WebSocket MCP Tool Server"

STDIO_CAPABILITIES: dict[str, Any] = {
    "tools": {"listChanged": True},
}

WEBSOCKET_CAPABILITIES: dict[str, Any] = {
    "tools": {"listChanged": True},
    "resources": {"subscribe": True, "listChanged": True},
}


class TelemetrySettings(BaseModel):
    """Optional tracing configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServerSettings(BaseModel):
    """Top-level server configuration parsed from YAML.

    Example YAML::

        version: "1.0.0"
        host: 0.0.0.0
        port: 8765
        ordered: false
        http_timeout: 5
        log_level: INFO
        telemetry:
          enabled: true
          otlp_endpoint: ${OTLP_ENDPOINT}
    """

    name: str | None = Field(
        default=None,
        description="serverInfo.name; defaults to the transport's built-in name.",
    )
    version: str = "1.0.0"
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    host: str = "127.0.0.1"
    port: int = Field(default=8765, ge=0, le=65535)
    path: str = "/mcp/websocket"
    ordered: bool = Field(
        default=False,
        description="stdio only: write responses in input order instead of completion order.",
    )
    http_timeout: float = Field(default=10.0, gt=0)
    log_level: str = "WARNING"
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    def initialize_result(self, transport: TransportName) -> InitializeResult:
        """Build the fixed ``initialize`` payload for *transport*."""
        if transport == "stdio":
            default_name, capabilities = STDIO_SERVER_NAME, STDIO_CAPABILITIES
        else:
            default_name, capabilities = WEBSOCKET_SERVER_NAME, WEBSOCKET_CAPABILITIES
        return InitializeResult(
            protocol_version=self.protocol_version,
            capabilities=capabilities,
            server_info=ServerInfo(name=self.name or default_name, version=self.version),
        )


def load_settings(path: str | Path | None = None) -> ServerSettings:
    """Read YAML, interpolate env vars, and validate.

    Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
    using :func:`os.path.expandvars` before YAML parsing.  With no *path*
    the defaults are returned.

    Raises:
        ConfigError: On read errors, YAML parse errors or validation failures.
    """
    if path is None:
        return ServerSettings()

    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {p}: {exc}") from exc

    expanded = os.path.expandvars(raw)

    try:
        data: Any = yaml.safe_load(expanded)
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        return ServerSettings()
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")

    try:
        return ServerSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
