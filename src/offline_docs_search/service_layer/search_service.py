"""Search session orchestration: paginated results plus query history."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from offline_docs_search.documentation_search_engine import DocumentationSearchEngine
from offline_docs_search.domain.history import SearchHistory
from offline_docs_search.domain.search import SearchResult
from offline_docs_search.service_layer.history_service import SearchHistoryService


logger = logging.getLogger(__name__)


class SearchState(BaseModel):
    """Snapshot of one search session."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    results: list[SearchResult] = Field(default_factory=list)
    is_searching: bool = False
    error: str | None = None
    has_more: bool = False
    page: int = 1
    total_results: int = 0
    history: SearchHistory = Field(default_factory=SearchHistory)


class SearchService:
    """Runs queries page by page and remembers successful ones.

    Each call returns the new ``SearchState``; ``state`` always holds the
    latest snapshot.
    """

    def __init__(
        self,
        engine: DocumentationSearchEngine,
        history: SearchHistoryService,
        *,
        max_results: int = 50,
    ) -> None:
        if max_results < 1:
            raise ValueError("max_results must be at least 1")
        self.engine = engine
        self.history = history
        self.max_results = max_results
        self._state = SearchState()

    @property
    def state(self) -> SearchState:
        return self._state

    async def load_history(self) -> SearchState:
        queries = await self.history.get_history()
        self._update(history=self._state.history.model_copy(update={"queries": queries}))
        return self._state

    async def search(self, query: str, page: int = 1) -> SearchState:
        """Run ``query`` and return the state holding the requested page."""
        if page < 1:
            raise ValueError("page must be at least 1")

        if not query.strip():
            return self._update(query=query, results=[], error=None, has_more=False, page=1, total_results=0)

        self._update(query=query, is_searching=True, error=None)
        limit = self.max_results * page
        # One extra result tells whether another page exists
        response = self.engine.search_documents(query, limit + 1)

        if response.error is not None:
            logger.info("Search for %r returned error: %s", query, response.error)
            if page == 1:
                return self._update(
                    is_searching=False, error=response.error, results=[], has_more=False, total_results=0
                )
            # Pages already delivered stay visible
            return self._update(is_searching=False, error=response.error)

        visible = response.results[:limit]
        page_results = visible[(page - 1) * self.max_results :]
        results = page_results if page == 1 else [*self._state.results, *page_results]
        self._update(
            results=results,
            is_searching=False,
            has_more=response.total_results > limit,
            page=page,
            total_results=len(visible),
        )

        if page == 1:
            history = await self.history.add_to_history(query.strip())
            self._update(history=history)
        return self._state

    async def load_more(self) -> SearchState:
        """Fetch the next page if one exists and no search is running."""
        if not self._state.has_more or self._state.is_searching:
            return self._state
        return await self.search(self._state.query, self._state.page + 1)

    def clear_search(self) -> SearchState:
        return self._update(query="", results=[], error=None, has_more=False, page=1, total_results=0)

    async def clear_history(self) -> SearchState:
        history = await self.history.clear_history()
        return self._update(history=history)

    async def repeat_search(self, query: str) -> SearchState:
        """Re-run a query picked from history."""
        return await self.search(query)

    def _update(self, **changes: object) -> SearchState:
        self._state = self._state.model_copy(update=changes)
        return self._state
