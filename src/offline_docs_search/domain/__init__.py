"""Domain layer - search results and history state, free of I/O."""

from offline_docs_search.domain.history import (
    HISTORY_STORAGE_KEY,
    MAX_HISTORY_ENTRIES,
    AddQuery,
    ClearHistory,
    HistoryAction,
    ReplaceHistory,
    SearchHistory,
    reduce_history,
)
from offline_docs_search.domain.search import HighlightSegment, ResultHighlights, SearchResponse, SearchResult


__all__ = [
    "HISTORY_STORAGE_KEY",
    "MAX_HISTORY_ENTRIES",
    "AddQuery",
    "ClearHistory",
    "HighlightSegment",
    "HistoryAction",
    "ReplaceHistory",
    "ResultHighlights",
    "SearchHistory",
    "SearchResponse",
    "SearchResult",
    "reduce_history",
]
