"""Service layer - search sessions and history orchestration."""

from .history_service import SearchHistoryService
from .search_service import SearchService, SearchState


__all__ = [
    "SearchHistoryService",
    "SearchService",
    "SearchState",
]
