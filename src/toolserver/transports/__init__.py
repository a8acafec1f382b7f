"""Transports — stdio stream and WebSocket session adapters."""

from toolserver.transports.stdio import StdioServer
from toolserver.transports.websocket import SessionRegistry, WebSocketServer

__all__ = [
    "SessionRegistry",
    "StdioServer",
    "WebSocketServer",
]
