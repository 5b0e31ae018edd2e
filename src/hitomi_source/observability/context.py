"""Per-task log correlation: trace and span ids plus the source operation in flight."""

from __future__ import annotations

from contextvars import ContextVar, Token
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("hitomi_trace_context", default=None)


def new_trace_id() -> str:
    return uuid4().hex


def new_span_id() -> str:
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Current correlation ids, minting a fresh pair on first use in a task."""
    ctx = trace_context.get()
    if not ctx or not ctx.get("trace_id"):
        ctx = {"trace_id": new_trace_id(), "span_id": new_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def enter_operation(name: str, span_id: str | None = None) -> Token:
    """Tag log lines emitted from here on with ``name`` (and ``span_id`` when given).

    Pass the returned token to :func:`exit_operation` to restore the outer context.
    """
    ctx = {**get_trace_context(), "operation": name}
    if span_id:
        ctx["span_id"] = span_id
    return trace_context.set(ctx)


def exit_operation(token: Token) -> None:
    trace_context.reset(token)
