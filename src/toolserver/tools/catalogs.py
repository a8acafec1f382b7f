"""Built-in tool catalogs for the two transports.

The stdio server exposes ``get_user_info`` and ``database_query``; the
websocket server exposes ``spring_service_call`` and ``api_call``.  The
default executors are stand-ins for the real business logic, which callers
swap in through *overrides*.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx

from toolserver.protocol.errors import ToolExecutionError
from toolserver.protocol.models import ToolDescriptor
from toolserver.tools.registry import Tool, ToolExecutor, ToolRegistry

# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

GET_USER_INFO = ToolDescriptor(
    name="get_user_info",
    description="Look up a user's profile by id.",
    input_schema={
        "type": "object",
        "properties": {
            "userId": {"type": "string", "description": "User id"},
        },
        "required": ["userId"],
    },
)

DATABASE_QUERY = ToolDescriptor(
    name="database_query",
    description="Run a database query.",
    input_schema={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "SQL query"},
            "limit": {"type": "number", "description": "Maximum number of rows", "default": 10},
        },
        "required": ["query"],
    },
)

SPRING_SERVICE_CALL = ToolDescriptor(
    name="spring_service_call",
    description="Call a method on an internal service.",
    input_schema={
        "type": "object",
        "properties": {
            "serviceName": {"type": "string", "description": "Service name"},
            "methodName": {"type": "string", "description": "Method name"},
            "parameters": {"type": "object", "description": "Method parameters"},
        },
        "required": ["serviceName", "methodName"],
    },
)

API_CALL = ToolDescriptor(
    name="api_call",
    description="Call an external HTTP API.",
    input_schema={
        "type": "object",
        "properties": {
            "url": {"type": "string", "description": "API URL"},
            "method": {"type": "string", "description": "HTTP method", "default": "GET"},
            "headers": {"type": "object", "description": "HTTP headers"},
            "body": {"type": "object", "description": "Request body"},
        },
        "required": ["url"],
    },
)

# ---------------------------------------------------------------------------
# Default executors
# ---------------------------------------------------------------------------


def get_user_info(arguments: dict[str, Any]) -> str:
    user_id = arguments["userId"]
    return f"User {user_id}: name=Gildong Hong, email=hong@example.com"


def database_query(arguments: dict[str, Any]) -> str:
    limit = arguments["limit"]
    if isinstance(limit, float) and limit.is_integer():
        limit = int(limit)
    return f"Query result for: {arguments['query']} (limit {limit} rows)"


def spring_service_call(arguments: dict[str, Any]) -> str:
    parameters = arguments.get("parameters") or {}
    return (
        f"Called {arguments['serviceName']}.{arguments['methodName']} "
        f"with parameters {json.dumps(parameters, sort_keys=True)}"
    )


def make_api_call(timeout: float = 10.0) -> ToolExecutor:
    """Return an ``api_call`` executor that performs the request with httpx."""

    def api_call(arguments: dict[str, Any]) -> str:
        method = str(arguments["method"]).upper()
        url = arguments["url"]
        headers = {str(k): str(v) for k, v in (arguments.get("headers") or {}).items()}
        body = arguments.get("body")

        try:
            with httpx.Client(timeout=timeout) as client:
                response = client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    json=body,
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ToolExecutionError("api_call", str(exc)) from exc

        return f"{method} {url} -> {response.status_code}\n{response.text}"

    return api_call


# ---------------------------------------------------------------------------
# Catalog builders
# ---------------------------------------------------------------------------


def stdio_catalog(overrides: Mapping[str, ToolExecutor] | None = None) -> ToolRegistry:
    """Build the stdio server's registry."""
    defaults: dict[str, tuple[ToolDescriptor, ToolExecutor]] = {
        GET_USER_INFO.name: (GET_USER_INFO, get_user_info),
        DATABASE_QUERY.name: (DATABASE_QUERY, database_query),
    }
    return _build(defaults, overrides)


def websocket_catalog(
    overrides: Mapping[str, ToolExecutor] | None = None,
    *,
    http_timeout: float = 10.0,
) -> ToolRegistry:
    """Build the websocket server's registry."""
    defaults: dict[str, tuple[ToolDescriptor, ToolExecutor]] = {
        SPRING_SERVICE_CALL.name: (SPRING_SERVICE_CALL, spring_service_call),
        API_CALL.name: (API_CALL, make_api_call(http_timeout)),
    }
    return _build(defaults, overrides)


def _build(
    defaults: dict[str, tuple[ToolDescriptor, ToolExecutor]],
    overrides: Mapping[str, ToolExecutor] | None,
) -> ToolRegistry:
    overrides = overrides or {}
    unknown = set(overrides) - set(defaults)
    if unknown:
        msg = f"Cannot override unknown tool(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)
    return ToolRegistry(
        Tool(descriptor=descriptor, executor=overrides.get(name, executor))
        for name, (descriptor, executor) in defaults.items()
    )
