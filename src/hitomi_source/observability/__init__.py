"""Observability module for OpenTelemetry-aligned tracing and structured logging."""

from hitomi_source.observability.context import get_trace_context, set_trace_context, trace_context
from hitomi_source.observability.logging import JsonFormatter, configure_logging
from hitomi_source.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
]
