"""Documentation Search Engine - the query entry point.

Wraps the TF-IDF ranking engine with the lifecycle and failure contract that
callers rely on:
- the index is attached exactly once; later attempts are ignored
- queries before indexing return an "index not available" error value
- unexpected failures while ranking become an error value, never an exception

Queries run synchronously to completion. The loaded index is never mutated,
so concurrent callers may share one engine.
"""

from __future__ import annotations

import logging
from pathlib import Path
import time

from opentelemetry.trace import Status, StatusCode

from offline_docs_search.config import Settings
from offline_docs_search.domain.search import SearchResponse
from offline_docs_search.observability.context import tag_query
from offline_docs_search.observability.metrics import INDEX_DOC_COUNT, SEARCH_LATENCY, SEARCH_QUERIES
from offline_docs_search.observability.tracing import create_span
from offline_docs_search.search.index_loader import load_search_index
from offline_docs_search.search.models import IndexFormatError, SearchIndex
from offline_docs_search.search.ranking_engine import TfIdfSearchEngine
from offline_docs_search.search.snippet import DEFAULT_EXCERPT_CHARS


logger = logging.getLogger(__name__)

INDEX_NOT_AVAILABLE = "Search index not available"
ENGINE_LABEL = "tfidf"


class DocumentationSearchEngine:
    """Ranked search over a documentation index with explicit error states.

    Interface Methods:
    - index_documents(index) -> bool
    - search_documents(query, max_results) -> SearchResponse
    - get_performance_metrics() -> dict
    """

    def __init__(self, *, excerpt_max_chars: int = DEFAULT_EXCERPT_CHARS) -> None:
        self._excerpt_max_chars = excerpt_max_chars
        self._engine: TfIdfSearchEngine | None = None
        self._search_count = 0
        self._last_latency_ms = 0.0

    @property
    def is_indexed(self) -> bool:
        return self._engine is not None

    def index_documents(self, index: SearchIndex) -> bool:
        """Attach ``index``; returns False if an index was already attached."""
        if self._engine is not None:
            logger.info("Search index already attached; ignoring re-index request")
            return False

        self._engine = TfIdfSearchEngine(index, excerpt_max_chars=self._excerpt_max_chars)
        INDEX_DOC_COUNT.labels(engine=ENGINE_LABEL).set(index.article_count)
        logger.info(
            "Search index attached: %d terms, %d articles",
            len(index.terms),
            index.article_count,
        )
        return True

    def search_documents(self, query: str, max_results: int) -> SearchResponse:
        """Search documentation and report failures as error values.

        Args:
            query: Raw query string, operators included
            max_results: Maximum number of results to return

        Returns:
            SearchResponse with ranked results, or an error message when the
            index is missing or ranking failed
        """
        if self._engine is None:
            SEARCH_QUERIES.labels(engine=ENGINE_LABEL, status="unavailable").inc()
            return SearchResponse(query=query, error=INDEX_NOT_AVAILABLE)

        tag_query(query)

        start = time.perf_counter()
        with create_span(
            "search.query",
            attributes={"search.query_length": len(query), "search.max_results": max_results},
        ) as span:
            try:
                results = self._engine.search(query, max_results)
            except Exception as exc:
                logger.exception("Search failed for query %r", query)
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                span.record_exception(exc)
                SEARCH_QUERIES.labels(engine=ENGINE_LABEL, status="error").inc()
                return SearchResponse(query=query, error=f"Search failed: {exc!s}")
            span.set_attribute("search.result_count", len(results))

        elapsed = time.perf_counter() - start
        SEARCH_LATENCY.labels(engine=ENGINE_LABEL).observe(elapsed)
        SEARCH_QUERIES.labels(engine=ENGINE_LABEL, status="ok").inc()
        self._search_count += 1
        self._last_latency_ms = elapsed * 1000
        logger.debug("Query returned %d results in %.2fms", len(results), self._last_latency_ms)

        return SearchResponse(query=query, results=results, total_results=len(results))

    def get_performance_metrics(self) -> dict:
        """Return basic counters for diagnostics."""
        metrics: dict[str, object] = {
            "index_available": self.is_indexed,
            "searches": self._search_count,
            "last_latency_ms": round(self._last_latency_ms, 3),
        }
        if self._engine is not None:
            metrics["articles"] = self._engine.index.article_count
            metrics["terms"] = len(self._engine.index.terms)
        return metrics


def create_documentation_search_engine(
    settings: Settings,
    *,
    index_path: Path | None = None,
) -> DocumentationSearchEngine:
    """Build an engine and attach the configured index when it can be loaded.

    A missing, unreadable or malformed index is logged and leaves the engine unindexed, so
    queries report "index not available" instead of failing.
    """
    engine = DocumentationSearchEngine(excerpt_max_chars=settings.excerpt_max_chars)
    path = index_path or settings.search_index_path
    if path is None:
        logger.warning("No search index configured")
        return engine

    try:
        engine.index_documents(load_search_index(path))
    except FileNotFoundError:
        logger.error("Search index not found: %s", path)
    except IndexFormatError as exc:
        logger.error("Invalid search index %s: %s", path, exc)
    except OSError as exc:
        logger.error("Cannot read search index %s: %s", path, exc)
    return engine
