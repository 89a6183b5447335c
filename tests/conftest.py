"""Shared test fixtures and configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import orjson
import pytest

from offline_docs_search.search.models import SearchIndex


# Environment overriding every configurable value
TEST_ENV = {
    "SEARCH_INDEX_PATH": "",
    "SEARCH_MAX_RESULTS": "50",
    "SEARCH_HISTORY_LIMIT": "10",
    "EXCERPT_MAX_CHARS": "200",
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Reset settings-related environment variables for each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("SEARCH_HISTORY_PATH", str(tmp_path / "history.json"))


def posting(doc_id: str, positions: list[int], field: str = "content") -> dict:
    return {"docId": doc_id, "tf": len(positions), "positions": positions, "field": field}


def article(doc_id: str, title: str, *, word_count: int = 100, sections=None, code_blocks=None) -> dict:
    return {
        "id": doc_id,
        "title": title,
        "path": f"/docs/{doc_id.lower()}",
        "sections": sections or [],
        "codeBlocks": code_blocks or [],
        "wordCount": word_count,
    }


SAMPLE_INDEX_DATA = {
    "terms": {
        "buffer": {"df": 2, "postings": [posting("D1", [4]), posting("D2", [4])]},
        "overflow": {"df": 2, "postings": [posting("D1", [5]), posting("D2", [9])]},
        "kernel": {"df": 2, "postings": [posting("D3", [1, 7]), posting("D4", [0], "title")]},
        "memory": {
            "df": 3,
            "postings": [
                posting("D1", [10, 20, 30]),
                posting("D3", [12]),
                posting("D4", [3], "section"),
            ],
        },
        "safety": {"df": 1, "postings": [posting("D2", [11])]},
    },
    "articles": {
        "D1": article("D1", "Buffer Overflow Basics", sections=["Stack layout"]),
        "D2": article("D2", "Safe Buffers"),
        "D3": article("D3", "Driver Internals", code_blocks=["insmod driver.ko"]),
        "D4": article("D4", "Kernel Guide", sections=["Memory"]),
    },
}


@pytest.fixture
def sample_index_data() -> dict:
    """Wire-format index with four articles (D1-D4)."""
    return orjson.loads(orjson.dumps(SAMPLE_INDEX_DATA))


@pytest.fixture
def sample_index(sample_index_data) -> SearchIndex:
    return SearchIndex.from_dict(sample_index_data)


@pytest.fixture
def sample_index_path(tmp_path, sample_index_data) -> Path:
    path = tmp_path / "search-index.json"
    path.write_bytes(orjson.dumps(sample_index_data))
    return path


@pytest.fixture
def sample_documents() -> dict:
    """Raw documents for the mini engine, keyed by path."""
    return {
        "/guides/install": {
            "title": "Installation Guide",
            "path": "/guides/install",
            "content": "Install the package with pip and configure the settings file.",
            "sections": [{"title": "Requirements", "content": "Python and a virtual environment"}],
        },
        "/guides/config": {
            "title": "Configuration",
            "path": "/guides/config",
            "content": "Settings are read from environment variables.",
            "sections": [],
        },
        "/reference/search": {
            "title": "Search Reference",
            "path": "/reference/search",
            "content": "Queries support phrases, exclusions and field boosts.",
            "sections": [{"title": "Operators", "content": "title: and code: boost a field"}],
        },
    }


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by configure_logging()."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
