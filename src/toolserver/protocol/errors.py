"""Shared error types for the server.

Three families, matching the three failure layers of the server:

* transport — :class:`DecodeError`, :class:`EncodeError`
* protocol — :class:`InvalidParamsError`
* tool — :class:`ToolError` and its subclasses
"""


class ServerError(Exception):
    """Base error for all server failures."""


class ConfigError(ServerError):
    """The configuration file could not be read or validated."""


class DecodeError(ServerError):
    """An inbound message is not a decodable JSON-RPC request."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Invalid message" + (f": {detail}" if detail else ""))


class EncodeError(ServerError):
    """A response envelope could not be serialized."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Response serialization failed" + (f": {detail}" if detail else ""))


class InvalidParamsError(ServerError):
    """A recognized method was invoked with malformed ``params``."""

    def __init__(self, method: str, detail: str) -> None:
        self.method = method
        self.detail = detail
        super().__init__(f"Invalid params for {method}: {detail}")


class ToolError(ServerError):
    """Base error for tool-level failures, reported with ``isError: true``."""


class ToolNotFoundError(ToolError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class MissingArgumentError(ToolError):
    """A required argument declared by the tool's input schema is absent."""

    def __init__(self, tool: str, field: str) -> None:
        self.tool = tool
        self.field = field
        super().__init__(f"Missing required argument '{field}' for tool {tool}")


class InvalidArgumentError(ToolError):
    """An argument does not match the type declared by the input schema."""

    def __init__(self, tool: str, field: str, expected: str) -> None:
        self.tool = tool
        self.field = field
        self.expected = expected
        super().__init__(f"Argument '{field}' for tool {tool} must be of type {expected}")


class ToolExecutionError(ToolError):
    """A tool executor raised while running."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Tool execution failed: {name}" + (f" ({detail})" if detail else ""))
