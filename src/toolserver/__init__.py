"""toolserver — a small MCP tool server with stdio and WebSocket transports."""

from __future__ import annotations

__version__ = "0.1.0"
