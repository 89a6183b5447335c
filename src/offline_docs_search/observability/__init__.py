"""Observability module: structured logging, tracing and search metrics."""

from offline_docs_search.observability.context import get_trace_context, set_trace_context, tag_query, trace_context
from offline_docs_search.observability.logging import JsonFormatter, configure_logging
from offline_docs_search.observability.metrics import (
    INDEX_DOC_COUNT,
    SEARCH_LATENCY,
    SEARCH_QUERIES,
    get_metrics,
    init_metrics,
    track_latency,
)
from offline_docs_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_DOC_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_QUERIES",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "tag_query",
    "trace_context",
    "track_latency",
]
