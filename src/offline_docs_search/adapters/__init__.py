"""Adapters layer - key-value storage for search history."""

from .history_store import (
    AbstractKeyValueStore,
    HistoryStoreError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)


__all__ = [
    "AbstractKeyValueStore",
    "HistoryStoreError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
