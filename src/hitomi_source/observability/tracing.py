"""OpenTelemetry spans around the source's public operations."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer

from hitomi_source.observability.context import enter_operation, exit_operation


TRACER_NAME = "hitomi_source"


def init_tracing(service_name: str = "hitomi-source") -> TracerProvider:
    """Install an SDK tracer provider so spans carry real ids in log lines."""
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    trace.set_tracer_provider(provider)
    return provider


def get_tracer() -> Tracer:
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Run a source operation inside an OpenTelemetry span.

    The span name doubles as the ``operation`` field of every log line
    emitted inside it.
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(
        name, kind=kind, attributes=attributes, record_exception=False, set_status_on_exception=False
    ) as span:
        span_ctx = span.get_span_context()
        token = enter_operation(name, format(span_ctx.span_id, "016x") if span_ctx.is_valid else None)
        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise
        finally:
            exit_operation(token)
