"""Per-task trace ids and query tag read by the JSON log formatter."""

from __future__ import annotations

from contextvars import ContextVar
import secrets
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from opentelemetry.trace import Span

trace_context: ContextVar[dict[str, Any] | None] = ContextVar("trace_context", default=None)


def _fresh_context() -> dict[str, Any]:
    return {"trace_id": secrets.token_hex(16), "span_id": secrets.token_hex(8)}


def get_trace_context() -> dict[str, Any]:
    """Return the ids for the current task, minting random ones if unset."""
    ctx = trace_context.get()
    if not ctx or not ctx.get("trace_id"):
        ctx = _fresh_context()
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: Any) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def tag_query(query: str) -> None:
    """Attach the query being served to every record logged from here on."""
    trace_context.set({**get_trace_context(), "query": query})


def bind_span(span: Span) -> None:
    """Adopt the ids of an OpenTelemetry span, keeping any query tag."""
    span_ctx = span.get_span_context()
    trace_context.set(
        {
            **(trace_context.get() or {}),
            "trace_id": f"{span_ctx.trace_id:032x}",
            "span_id": f"{span_ctx.span_id:016x}",
        }
    )
