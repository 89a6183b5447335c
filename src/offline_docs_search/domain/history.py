"""Search history state and its reducer.

History is an explicit value owned by the caller. Every change goes through
``reduce_history(state, action)``, which returns a new state and never mutates
its input.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


HISTORY_STORAGE_KEY = "search_history"
MAX_HISTORY_ENTRIES = 10


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SearchHistory(BaseModel):
    """Most-recent-first, de-duplicated list of past queries."""

    model_config = ConfigDict(frozen=True)

    queries: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_now)


class AddQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str


class ClearHistory(BaseModel):
    model_config = ConfigDict(frozen=True)


class ReplaceHistory(BaseModel):
    """Swap in queries loaded from storage."""

    model_config = ConfigDict(frozen=True)

    queries: list[str]


HistoryAction = AddQuery | ClearHistory | ReplaceHistory


def reduce_history(
    state: SearchHistory,
    action: HistoryAction,
    *,
    limit: int = MAX_HISTORY_ENTRIES,
) -> SearchHistory:
    """Return the history that results from applying ``action`` to ``state``."""

    if isinstance(action, AddQuery):
        remaining = [query for query in state.queries if query != action.query]
        return SearchHistory(queries=[action.query, *remaining][:limit], timestamp=_now())
    if isinstance(action, ClearHistory):
        return SearchHistory(queries=[], timestamp=_now())
    if isinstance(action, ReplaceHistory):
        deduplicated = list(dict.fromkeys(action.queries))
        return SearchHistory(queries=deduplicated[:limit], timestamp=_now())
    raise TypeError(f"Unsupported history action: {type(action).__name__}")
