"""Tracing for the request path: dispatch, tool calls, transport messages.

Spans go through the OpenTelemetry API and are no-ops until
:func:`configure_telemetry` installs an SDK provider (``toolserver[otel]``).
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

ATTR_RPC_METHOD = "toolserver.rpc.method"
ATTR_RPC_ID = "toolserver.rpc.id"
ATTR_RPC_NOTIFICATION = "toolserver.rpc.notification"
ATTR_TOOL_NAME = "toolserver.tool.name"
ATTR_TOOL_IS_ERROR = "toolserver.tool.is_error"
ATTR_TRANSPORT = "toolserver.transport"
ATTR_SESSION_ID = "toolserver.session.id"
ATTR_BROADCAST_DELIVERED = "toolserver.broadcast.delivered"

_INSTRUMENTATION_NAME = "toolserver"


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "toolserver",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a tracer provider for *service_name*.

    Console spans are written to stderr because stdout carries the stdio
    protocol.  With *otlp_endpoint* set, spans are also batched to an OTLP
    gRPC collector.

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, for OTLP,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for tracing: pip install toolserver[otel]"
        raise ImportError(msg) from exc

    processors: list[Any] = []
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    if otlp_endpoint:
        processors.append(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    for processor in processors:
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    except ImportError as exc:
        msg = "opentelemetry-exporter-otlp is required for OTLP export: pip install toolserver[otel]"
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)
