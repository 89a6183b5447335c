"""Spans around index loading and query ranking."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from offline_docs_search.observability.context import bind_span
from offline_docs_search.observability.metrics import SERVICE_NAME


if TYPE_CHECKING:
    from collections.abc import Generator, Iterable, Mapping

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)


class _TracerState:
    tracer: Tracer | None = None


def init_tracing(
    service_name: str = SERVICE_NAME,
    span_processors: Iterable[SpanProcessor] | None = None,
) -> TracerProvider:
    """Build a tracer provider and route ``create_span`` through it.

    The provider becomes the global one only when the process has none yet,
    so repeated calls (one per test, for instance) keep working.
    """
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    for processor in span_processors or ():
        provider.add_span_processor(processor)
    if not isinstance(trace.get_tracer_provider(), TracerProvider):
        trace.set_tracer_provider(provider)
    _TracerState.tracer = provider.get_tracer(__name__)
    logger.debug("Tracer ready for %s", service_name)
    return provider


def get_tracer() -> Tracer:
    if _TracerState.tracer is None:
        init_tracing()
    return _TracerState.tracer  # type: ignore[return-value]


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Mapping[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Open a span whose ids are also stamped on log records.

    Exceptions leaving the block mark the span as failed and propagate.
    """
    with get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=dict(attributes or {}),
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        bind_span(span)
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise
