"""StdioServer — line-delimited JSON-RPC over standard input / output.

One JSON document per non-empty line in, one JSON document per line out.
The read loop hands every line to its own task, so a slow tool never stops
the next line from being read.  A single writer task owns stdout.
When stdin has a binary buffer, lines are read as bytes and decoded one at
a time, so an invalid UTF-8 byte only spoils the line it sits on.

By default responses are written in the order their processing completes,
which need not match input order.  ``ordered=True`` adds a sequencing stage
that writes them in input order instead.

Transport-level failures (undecodable lines, unserializable responses,
unexpected exceptions) are written to stderr as ``id = null`` error
envelopes and never reach stdout.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING, BinaryIO, TextIO

from toolserver.protocol.codec import decode, encode, error_envelope
from toolserver.protocol.errors import DecodeError, EncodeError
from toolserver.utils.telemetry import ATTR_TRANSPORT, get_tracer

if TYPE_CHECKING:
    from toolserver.protocol.dispatcher import MethodDispatcher

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


class StdioServer:
    """Serves a :class:`MethodDispatcher` over a pair of text streams.

    Usage::

        server = StdioServer(dispatcher)
        await server.serve()      # returns at EOF once in-flight calls finish
    """

    def __init__(
        self,
        dispatcher: MethodDispatcher,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        ordered: bool = False,
    ) -> None:
        self._dispatcher = dispatcher
        self._stdin = stdin if stdin is not None else sys.stdin
        self._reader: BinaryIO | TextIO = getattr(self._stdin, "buffer", self._stdin)
        self._stdout = stdout if stdout is not None else sys.stdout
        self._stderr = stderr if stderr is not None else sys.stderr
        self._ordered = ordered
        self._outbox: asyncio.Queue[asyncio.Task[str | None] | str | None] = asyncio.Queue()
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def ordered(self) -> bool:
        return self._ordered

    async def serve(self) -> None:
        """Read lines until EOF, then drain in-flight work and return."""
        writer = asyncio.create_task(self._write_loop())
        logger.info("stdio server started (ordered=%s)", self._ordered)
        try:
            await self._read_loop()
            if self._in_flight:
                await asyncio.gather(*self._in_flight, return_exceptions=True)
            await self._outbox.put(None)
            await writer
        finally:
            for task in self._in_flight:
                task.cancel()
            if not writer.done():
                writer.cancel()
        logger.info("stdio server stopped")

    async def _read_loop(self) -> None:
        while True:
            try:
                line = await asyncio.to_thread(self._reader.readline)
            except UnicodeDecodeError as exc:
                self._report(f"Malformed input stream: {exc}")
                continue
            except Exception as exc:
                logger.exception("stdin read failed")
                self._report(f"Server error: {exc}")
                return

            if not line:
                return
            if not line.strip():
                continue
            self._submit(line)

    def _submit(self, line: str | bytes) -> None:
        if self._ordered:
            ordered_task = asyncio.create_task(self._process(line))
            self._outbox.put_nowait(ordered_task)
            return
        task = asyncio.create_task(self._process_and_enqueue(line))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _process_and_enqueue(self, line: str | bytes) -> None:
        payload = await self._process(line)
        if payload is not None:
            await self._outbox.put(payload)

    async def _process(self, line: str | bytes) -> str | None:
        """Decode, dispatch, and encode one line; ``None`` means nothing to write."""
        with _tracer.start_as_current_span("stdio.message") as span:
            span.set_attribute(ATTR_TRANSPORT, "stdio")
            try:
                request = decode(line)
            except DecodeError as exc:
                self._report(str(exc))
                return None

            try:
                response = await self._dispatcher.dispatch(request)
                if response is None:
                    return None
                return encode(response)
            except EncodeError as exc:
                logger.error("Dropping response for id=%r: %s", request.id, exc)
                self._report(str(exc))
            except Exception as exc:
                logger.exception("Unexpected failure processing id=%r", request.id)
                self._report(f"Server error: {exc}")
            return None

    async def _write_loop(self) -> None:
        while True:
            item = await self._outbox.get()
            if item is None:
                return
            payload = await item if isinstance(item, asyncio.Task) else item
            if payload is None:
                continue
            try:
                self._stdout.write(payload + "\n")
                self._stdout.flush()
            except OSError as exc:
                logger.error("stdout write failed: %s", exc)
                self._report(f"Cannot write response: {exc}")

    def _report(self, message: str) -> None:
        """Write an ``id = null`` error envelope to the diagnostic stream."""
        try:
            self._stderr.write(error_envelope(message) + "\n")
            self._stderr.flush()
        except OSError:
            logger.exception("stderr write failed")
