"""Unit tests for history key-value stores."""

import json

import pytest

from offline_docs_search.adapters.history_store import (
    HistoryStoreError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_in_memory_store_round_trip():
    store = InMemoryKeyValueStore()

    await store.set_item("key", "value")
    assert await store.get_item("key") == "value"

    await store.remove_item("key")
    await store.remove_item("key")
    assert await store.get_item("key") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_file_store_missing_file_reads_as_empty(tmp_path):
    store = JsonFileKeyValueStore(tmp_path / "absent.json")

    assert await store.get_item("search_history") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_file_store_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    await JsonFileKeyValueStore(path).set_item("search_history", '["a"]')

    assert await JsonFileKeyValueStore(path).get_item("search_history") == '["a"]'
    assert json.loads(path.read_text(encoding="utf-8")) == {"search_history": '["a"]'}
    assert not path.with_suffix(".json.tmp").exists()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_file_store_keeps_other_keys(tmp_path):
    store = JsonFileKeyValueStore(tmp_path / "store.json")
    await store.set_item("one", "1")
    await store.set_item("two", "2")

    await store.remove_item("one")

    assert await store.get_item("one") is None
    assert await store.get_item("two") == "2"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_file_store_corrupt_file_raises(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")

    with pytest.raises(HistoryStoreError, match="Corrupt"):
        await JsonFileKeyValueStore(path).get_item("search_history")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_file_store_rejects_non_object_content(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(HistoryStoreError, match="JSON object"):
        await JsonFileKeyValueStore(path).get_item("search_history")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_file_store_unusable_path_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(HistoryStoreError, match="Failed to"):
        await JsonFileKeyValueStore(blocker / "store.json").set_item("key", "value")
