"""Tests for the line-delimited stdio transport."""

from __future__ import annotations

import io
import json
import threading
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from toolserver.protocol.dispatcher import MethodDispatcher
from toolserver.protocol.models import InitializeResult, JsonRpcResponse, ServerInfo, ToolDescriptor
from toolserver.tools.catalogs import stdio_catalog
from toolserver.tools.registry import Tool, ToolRegistry
from toolserver.transports.stdio import StdioServer


async def _serve(
    dispatcher: Any,
    lines: list[str],
    *,
    ordered: bool = False,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout, stderr = io.StringIO(), io.StringIO()
    await StdioServer(dispatcher, stdin=stdin, stdout=stdout, stderr=stderr, ordered=ordered).serve()
    return _parse(stdout), _parse(stderr)


def _parse(stream: io.StringIO) -> list[dict[str, Any]]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def _gated_dispatcher() -> MethodDispatcher:
    """``slow`` cannot finish until ``fast`` has run."""
    gate = threading.Event()

    def slow(arguments: dict[str, Any]) -> str:
        gate.wait(timeout=5)
        return "slow"

    def fast(arguments: dict[str, Any]) -> str:
        gate.set()
        return "fast"

    registry = ToolRegistry([
        Tool(descriptor=ToolDescriptor(name="slow"), executor=slow),
        Tool(descriptor=ToolDescriptor(name="fast"), executor=fast),
    ])
    return MethodDispatcher(registry, InitializeResult(server_info=ServerInfo(name="t")))


def _call(request_id: str, name: str) -> str:
    return json.dumps({
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": {}},
    })


class TestStdioServer:
    async def test_database_query_example(self) -> None:
        dispatcher = MethodDispatcher(stdio_catalog(), InitializeResult(server_info=ServerInfo(name="t")))
        line = (
            '{"jsonrpc":"2.0","id":"1","method":"tools/call","params":'
            '{"name":"database_query","arguments":{"query":"SELECT 1","limit":5}}}'
        )
        out, err = await _serve(dispatcher, [line])
        assert err == []
        assert len(out) == 1
        assert out[0]["id"] == "1"
        assert out[0]["result"]["isError"] is False
        text = out[0]["result"]["content"][0]["text"]
        assert "SELECT 1" in text
        assert "5" in text

    async def test_unknown_method_example(self, dispatcher: MethodDispatcher) -> None:
        out, _ = await _serve(dispatcher, ['{"jsonrpc":"2.0","id":"2","method":"unknown/thing"}'])
        assert out == [
            {"jsonrpc": "2.0", "id": "2", "error": {"code": -32000, "message": "Unknown method: unknown/thing"}},
        ]

    async def test_blank_lines_skipped(self, dispatcher: MethodDispatcher) -> None:
        out, err = await _serve(
            dispatcher, ["", "   ", '{"jsonrpc":"2.0","id":1,"method":"tools/list"}', ""]
        )
        assert len(out) == 1
        assert err == []

    async def test_notification_produces_nothing(self, dispatcher: MethodDispatcher) -> None:
        out, err = await _serve(dispatcher, ['{"jsonrpc":"2.0","method":"notifications/initialized"}'])
        assert out == []
        assert err == []

    async def test_one_response_per_request(self, dispatcher: MethodDispatcher) -> None:
        lines = [
            '{"jsonrpc":"2.0","id":1,"method":"initialize"}',
            '{"jsonrpc":"2.0","method":"notifications/initialized"}',
            '{"jsonrpc":"2.0","id":2,"method":"tools/list"}',
            '{"jsonrpc":"2.0","id":3,"method":"tools/call","params":{"name":"echo","arguments":{"text":"x"}}}',
            '{"jsonrpc":"2.0","id":4,"method":"tools/call","params":{"name":"nope","arguments":{}}}',
        ]
        out, _ = await _serve(dispatcher, lines)
        assert sorted(r["id"] for r in out) == [1, 2, 3, 4]

    async def test_malformed_line_goes_to_stderr_and_loop_continues(
        self, dispatcher: MethodDispatcher
    ) -> None:
        out, err = await _serve(
            dispatcher, ["{oops", '{"jsonrpc":"2.0","id":9,"method":"tools/list"}']
        )
        assert [r["id"] for r in out] == [9]
        assert len(err) == 1
        assert err[0]["id"] is None
        assert err[0]["error"]["code"] == -32000

    async def test_missing_method_goes_to_stderr(self, dispatcher: MethodDispatcher) -> None:
        out, err = await _serve(dispatcher, ['{"jsonrpc":"2.0","id":1}'])
        assert out == []
        assert "method" in err[0]["error"]["message"]

    async def test_completion_order_by_default(self) -> None:
        out, _ = await _serve(_gated_dispatcher(), [_call("a", "slow"), _call("b", "fast")])
        assert [r["id"] for r in out] == ["b", "a"]

    async def test_input_order_when_ordered(self) -> None:
        out, _ = await _serve(_gated_dispatcher(), [_call("a", "slow"), _call("b", "fast")], ordered=True)
        assert [r["id"] for r in out] == ["a", "b"]
        assert out[0]["result"]["content"][0]["text"] == "slow"

    async def test_encode_failure_reported_on_stderr_only(self) -> None:
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock(return_value=JsonRpcResponse.success(1, {"x": object()}))
        out, err = await _serve(dispatcher, ['{"jsonrpc":"2.0","id":1,"method":"tools/list"}'])
        assert out == []
        assert err[0]["id"] is None

    async def test_unexpected_dispatch_failure_reported_on_stderr(self) -> None:
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock(
            side_effect=[RuntimeError("boom"), JsonRpcResponse.success(2, {"ok": True})]
        )
        out, err = await _serve(
            dispatcher,
            [
                '{"jsonrpc":"2.0","id":1,"method":"tools/list"}',
                '{"jsonrpc":"2.0","id":2,"method":"tools/list"}',
            ],
            ordered=True,
        )
        assert [r["id"] for r in out] == [2]
        assert "boom" in err[0]["error"]["message"]

    async def test_each_response_is_flushed(self, dispatcher: MethodDispatcher) -> None:
        stdout = MagicMock()
        stdin = io.StringIO('{"jsonrpc":"2.0","id":1,"method":"tools/list"}\n')
        await StdioServer(dispatcher, stdin=stdin, stdout=stdout, stderr=io.StringIO()).serve()
        written = stdout.write.call_args[0][0]
        assert written.endswith("\n")
        assert json.loads(written)["id"] == 1
        stdout.flush.assert_called()

    async def test_empty_input_returns(self, dispatcher: MethodDispatcher) -> None:
        out, err = await _serve(dispatcher, [])
        assert out == []
        assert err == []


class TestByteInput:
    async def test_invalid_utf8_line_only_fails_itself(self, dispatcher: MethodDispatcher) -> None:
        raw = (
            b'{"jsonrpc":"2.0","id":1,"method":"tools/list"}\n'
            b'{"jsonrpc":"2.0","id":2,"method":"\xff"}\n'
            b'{"jsonrpc":"2.0","id":3,"method":"tools/list"}\n'
        )
        stdin = io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8")
        stdout, stderr = io.StringIO(), io.StringIO()
        await StdioServer(dispatcher, stdin=stdin, stdout=stdout, stderr=stderr, ordered=True).serve()

        out, err = _parse(stdout), _parse(stderr)
        assert [r["id"] for r in out] == [1, 3]
        assert len(err) == 1
        assert err[0]["id"] is None
        assert "UTF-8" in err[0]["error"]["message"]

    async def test_non_ascii_bytes_round_trip(self, dispatcher: MethodDispatcher) -> None:
        request = {
            "jsonrpc": "2.0",
            "id": "한",
            "method": "tools/call",
            "params": {"name": "echo", "arguments": {"text": "홍길동"}},
        }
        raw = json.dumps(request, ensure_ascii=False).encode("utf-8") + b"\r\n\n"
        stdin = io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8")
        stdout = io.StringIO()
        await StdioServer(dispatcher, stdin=stdin, stdout=stdout, stderr=io.StringIO()).serve()

        (response,) = _parse(stdout)
        assert response["id"] == "한"
        assert response["result"]["content"][0]["text"] == "echo:홍길동:1"
