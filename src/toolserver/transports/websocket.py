"""WebSocket transport — one long-lived session per client connection.

Each text (or UTF-8 binary) frame carries exactly one JSON-RPC document in
either direction.  A session handles its own messages strictly in order;
different sessions run independently.  :class:`SessionRegistry` tracks the
open sessions so a message can be broadcast to all of them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit
from uuid import uuid4

from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from toolserver.protocol.codec import encode, error_envelope
from toolserver.utils.telemetry import (
    ATTR_BROADCAST_DELIVERED,
    ATTR_SESSION_ID,
    ATTR_TRANSPORT,
    get_tracer,
)

if TYPE_CHECKING:
    from toolserver.protocol.dispatcher import MethodDispatcher

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)

DEFAULT_PATH = "/mcp/websocket"
POLICY_VIOLATION = 1008


class SessionRegistry:
    """Lock-guarded map of session id to live connection.

    ``broadcast`` takes a snapshot under the lock and sends outside it, so
    sessions may connect and disconnect while a broadcast is running.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def register(self, connection: Any, session_id: str | None = None) -> str:
        """Add *connection* and return its session id."""
        sid = session_id or uuid4().hex
        async with self._lock:
            self._sessions[sid] = connection
        return sid

    async def unregister(self, session_id: str) -> bool:
        """Drop *session_id*; returns ``False`` if it was not registered."""
        async with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def ids(self) -> list[str]:
        return list(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def broadcast(self, message: str) -> int:
        """Send *message* to every open session; returns the delivery count.

        Best effort: a session that fails the write is logged, skipped, and
        removed.  Nothing is raised to the caller.
        """
        async with self._lock:
            targets = list(self._sessions.items())

        delivered = 0
        failed: list[str] = []
        with _tracer.start_as_current_span("websocket.broadcast") as span:
            for sid, connection in targets:
                if not _is_open(connection):
                    continue
                try:
                    await connection.send(message)
                except Exception as exc:
                    logger.warning("Broadcast to session %s failed: %s", sid, exc)
                    failed.append(sid)
                else:
                    delivered += 1
            span.set_attribute(ATTR_BROADCAST_DELIVERED, delivered)

        for sid in failed:
            await self.unregister(sid)
        return delivered


class WebSocketServer:
    """Serves a :class:`MethodDispatcher` to WebSocket clients.

    Usage::

        server = WebSocketServer(dispatcher, host="0.0.0.0", port=8765)
        await server.serve()                      # until cancelled
        await server.broadcast('{"jsonrpc":"2.0","method":"ping"}')
    """

    def __init__(
        self,
        dispatcher: MethodDispatcher,
        *,
        host: str = "127.0.0.1",
        port: int = 8765,
        path: str | None = DEFAULT_PATH,
        registry: SessionRegistry | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._host = host
        self._port = port
        self._path = path
        self._registry = registry or SessionRegistry()

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    async def serve(self) -> None:
        """Accept connections until the task is cancelled."""
        async with serve(self.handle, self._host, self._port):
            logger.info(
                "WebSocket MCP server listening on ws://%s:%d%s",
                self._host,
                self._port,
                self._path or "",
            )
            await asyncio.Future()

    async def broadcast(self, message: str) -> int:
        """Push a pre-serialized message to every open session."""
        return await self._registry.broadcast(message)

    async def handle(self, connection: Any) -> None:
        """Run one session: register, answer messages in order, deregister."""
        request_path = urlsplit(connection.request.path).path
        if self._path is not None and request_path != self._path:
            logger.warning("Rejecting connection on unknown path %s", request_path)
            await connection.close(code=POLICY_VIOLATION, reason="unknown path")
            return

        session_id = await self._registry.register(connection)
        logger.info("MCP client connected: %s", session_id)
        try:
            async for message in connection:
                await self._handle_message(session_id, connection, message)
        except ConnectionClosed as exc:
            logger.debug("Session %s closed: %s", session_id, exc)
        finally:
            await self._registry.unregister(session_id)
            logger.info("MCP client disconnected: %s", session_id)

    async def _handle_message(self, session_id: str, connection: Any, message: str | bytes) -> None:
        with _tracer.start_as_current_span("websocket.message") as span:
            span.set_attribute(ATTR_TRANSPORT, "websocket")
            span.set_attribute(ATTR_SESSION_ID, session_id)
            try:
                response = await self._dispatcher.handle_raw(message)
                if response is None:
                    return
                payload = encode(response)
            except Exception as exc:
                logger.exception("Session %s: message processing failed", session_id)
                payload = error_envelope(f"Message processing error: {exc}")
            await connection.send(payload)


def _is_open(connection: Any) -> bool:
    return getattr(connection, "state", None) is State.OPEN
