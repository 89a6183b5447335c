"""Search history backed by a key-value store.

Persistence is fail-soft: read errors yield an empty history, write errors are
logged and the change is kept in memory.
"""

from __future__ import annotations

import logging

import orjson

from offline_docs_search.adapters.history_store import AbstractKeyValueStore
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


logger = logging.getLogger(__name__)


def _decode_queries(raw: str) -> list[str]:
    data = orjson.loads(raw)
    if isinstance(data, dict):
        data = data.get("queries", [])
    if not isinstance(data, list):
        raise ValueError("stored history must be a list of queries")
    return [str(query) for query in data]


class SearchHistoryService:
    """Recent queries, most recent first, bounded to ``limit`` entries."""

    def __init__(
        self,
        store: AbstractKeyValueStore,
        *,
        limit: int = MAX_HISTORY_ENTRIES,
        storage_key: str = HISTORY_STORAGE_KEY,
    ) -> None:
        self.store = store
        self.limit = limit
        self.storage_key = storage_key
        self._state = SearchHistory()
        self._unsaved = False

    @property
    def state(self) -> SearchHistory:
        return self._state

    async def get_history(self) -> list[str]:
        """Return stored queries; empty when the store is unavailable."""
        if self._unsaved:
            # The store is behind the in-memory state after a failed write
            return list(self._state.queries)

        try:
            raw = await self.store.get_item(self.storage_key)
            queries = _decode_queries(raw) if raw else []
        except Exception as exc:
            logger.warning("Failed to load search history: %s", exc)
            queries = []

        self._apply(ReplaceHistory(queries=queries))
        return list(self._state.queries)

    async def add_to_history(self, query: str) -> SearchHistory:
        """Move ``query`` to the front, keep the newest entries, persist."""
        if not query:
            return self._state
        await self.get_history()
        self._apply(AddQuery(query=query))
        await self._persist()
        return self._state

    async def clear_history(self) -> SearchHistory:
        """Forget every query and persist the empty history."""
        self._apply(ClearHistory())
        try:
            await self.store.remove_item(self.storage_key)
            self._unsaved = False
        except Exception as exc:
            logger.warning("Failed to clear search history: %s", exc)
            self._unsaved = True
        return self._state

    def _apply(self, action: HistoryAction) -> None:
        self._state = reduce_history(self._state, action, limit=self.limit)

    async def _persist(self) -> None:
        payload = orjson.dumps(list(self._state.queries)).decode("utf-8")
        try:
            await self.store.set_item(self.storage_key, payload)
            self._unsaved = False
        except Exception as exc:
            logger.warning("Failed to save search history: %s", exc)
            self._unsaved = True
