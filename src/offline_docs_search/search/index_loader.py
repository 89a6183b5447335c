"""Load a serialized search index produced by the external build step."""

from __future__ import annotations

import logging
from pathlib import Path

import orjson

from offline_docs_search.search.models import IndexFormatError, SearchIndex


logger = logging.getLogger(__name__)


def parse_search_index(payload: bytes | str) -> SearchIndex:
    """Parse a JSON document into a :class:`SearchIndex`."""

    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as exc:
        raise IndexFormatError(f"Search index is not valid JSON: {exc}") from exc
    return SearchIndex.from_dict(data)


def load_search_index(path: Path) -> SearchIndex:
    """Read and parse the index at ``path``.

    Raises:
        FileNotFoundError: The file does not exist.
        OSError: The path cannot be read, e.g. it is a directory.
        IndexFormatError: The file is not a well-formed index.
    """
    payload = path.read_bytes()
    index = parse_search_index(payload)
    logger.info(
        "Loaded search index from %s: %d terms, %d articles",
        path,
        len(index.terms),
        index.article_count,
    )
    return index
