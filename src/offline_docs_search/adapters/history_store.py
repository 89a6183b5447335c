"""Key-value stores backing search history.

Stores map string keys to string values; adapters raise HistoryStoreError when
the backing storage cannot be used.
"""

from __future__ import annotations

import abc
import json
import logging
from pathlib import Path
import shutil

import anyio


logger = logging.getLogger(__name__)


class HistoryStoreError(RuntimeError):
    """Raised when the key-value store cannot be read or written."""


class AbstractKeyValueStore(abc.ABC):
    """Asynchronous string key-value store."""

    @abc.abstractmethod
    async def get_item(self, key: str) -> str | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def remove_item(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Process-local store, used when no persistence is configured."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileKeyValueStore(AbstractKeyValueStore):
    """All keys live in one JSON object on disk, rewritten atomically."""

    def __init__(self, path: Path) -> None:
        self.path = path

    async def get_item(self, key: str) -> str | None:
        items = await self._read_all()
        value = items.get(key)
        return value if isinstance(value, str) else None

    async def set_item(self, key: str, value: str) -> None:
        items = await self._read_all()
        items[key] = value
        await self._write_all(items)

    async def remove_item(self, key: str) -> None:
        items = await self._read_all()
        if key not in items:
            return
        del items[key]
        await self._write_all(items)

    async def _read_all(self) -> dict[str, object]:
        try:
            async with await anyio.open_file(self.path, "r", encoding="utf-8") as fp:
                content = await fp.read()
        except FileNotFoundError:
            return {}
        except OSError as err:
            raise HistoryStoreError(f"Failed to read {self.path}: {err}") from err

        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as err:
            raise HistoryStoreError(f"Corrupt key-value file {self.path}: {err}") from err
        if not isinstance(data, dict):
            raise HistoryStoreError(f"Key-value file {self.path} must contain a JSON object")
        return data

    async def _write_all(self, items: dict[str, object]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with await anyio.open_file(tmp_path, "w", encoding="utf-8") as fp:
                await fp.write(json.dumps(items, indent=2, sort_keys=True))
            await anyio.to_thread.run_sync(shutil.move, str(tmp_path), str(self.path))
        except OSError as err:
            raise HistoryStoreError(f"Failed to write {self.path}: {err}") from err
        logger.debug("Persisted %d keys to %s", len(items), self.path)
