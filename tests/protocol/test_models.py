"""Tests for JSON-RPC envelope and MCP payload models."""

import pytest
from pydantic import ValidationError

from toolserver.protocol.models import (
    SERVER_ERROR,
    InitializeResult,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    ToolDescriptor,
)


class TestJsonRpcRequest:
    def test_defaults(self) -> None:
        req = JsonRpcRequest(method="tools/list")
        assert req.jsonrpc == "2.0"
        assert req.id is None
        assert req.params is None

    def test_missing_id_is_notification(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert req.is_notification

    def test_explicit_null_id_is_not_notification(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": None, "method": "x"})
        assert req.id is None
        assert not req.is_notification

    def test_string_and_int_ids_preserved(self) -> None:
        assert JsonRpcRequest.model_validate({"method": "m", "id": "1"}).id == "1"
        assert JsonRpcRequest.model_validate({"method": "m", "id": 1}).id == 1

    def test_frozen(self) -> None:
        req = JsonRpcRequest(method="tools/list")
        with pytest.raises(ValidationError):
            req.method = "other"  # type: ignore[misc]


class TestJsonRpcResponse:
    def test_success_wire_shape(self) -> None:
        resp = JsonRpcResponse.success("7", {"tools": []})
        assert resp.to_wire() == {"jsonrpc": "2.0", "id": "7", "result": {"tools": []}}

    def test_failure_wire_shape(self) -> None:
        resp = JsonRpcResponse.failure(3, "boom")
        assert resp.to_wire() == {
            "jsonrpc": "2.0",
            "id": 3,
            "error": {"code": SERVER_ERROR, "message": "boom"},
        }

    def test_failure_without_id_keeps_null_id(self) -> None:
        wire = JsonRpcResponse.failure(None, "bad").to_wire()
        assert "id" in wire
        assert wire["id"] is None

    def test_rejects_both_result_and_error(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcResponse(id=1, result={}, error=JsonRpcError(message="x"))

    def test_rejects_neither_result_nor_error(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcResponse(id=1)

    def test_error_has_no_data_field(self) -> None:
        wire = JsonRpcResponse.failure(1, "x").to_wire()
        assert set(wire["error"]) == {"code", "message"}


class TestToolDescriptor:
    def test_wire_uses_camel_case_schema(self) -> None:
        desc = ToolDescriptor(name="t", description="d", input_schema={"type": "object"})
        assert desc.to_wire() == {
            "name": "t",
            "description": "d",
            "inputSchema": {"type": "object"},
        }

    def test_accepts_alias(self) -> None:
        desc = ToolDescriptor.model_validate({"name": "t", "inputSchema": {"required": ["a"]}})
        assert desc.required == ["a"]

    def test_wire_is_a_copy(self) -> None:
        desc = ToolDescriptor(name="t", input_schema={"properties": {"a": {"type": "string"}}})
        desc.to_wire()["inputSchema"]["properties"]["a"]["type"] = "number"
        assert desc.input_schema["properties"]["a"]["type"] == "string"


class TestInitializeResult:
    def test_wire_shape(self) -> None:
        result = InitializeResult(
            capabilities={"tools": {"listChanged": True}},
            server_info=ServerInfo(name="srv"),
        )
        assert result.to_wire() == {
            "protocolVersion": "2024-11-05",
            "capabilities": {"tools": {"listChanged": True}},
            "serverInfo": {"name": "srv", "version": "1.0.0"},
        }
