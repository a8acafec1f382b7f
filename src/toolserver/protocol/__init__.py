"""Protocol layer — JSON-RPC envelopes, codec, errors, and method dispatch."""

from toolserver.protocol.codec import decode, encode, error_envelope
from toolserver.protocol.errors import (
    DecodeError,
    EncodeError,
    InvalidParamsError,
    ServerError,
    ToolError,
    ToolNotFoundError,
)
from toolserver.protocol.models import (
    SERVER_ERROR,
    InitializeResult,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    ToolDescriptor,
)

__all__ = [
    "SERVER_ERROR",
    "DecodeError",
    "EncodeError",
    "InitializeResult",
    "InvalidParamsError",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "ServerError",
    "ServerInfo",
    "ToolDescriptor",
    "ToolError",
    "ToolNotFoundError",
    "decode",
    "encode",
    "error_envelope",
]
