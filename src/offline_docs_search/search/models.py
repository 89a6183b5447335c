"""Inverted index data models.

The index is produced by an external build step and consumed read-only. Wire
keys follow the build step's camelCase naming (``docId``, ``wordCount``,
``codeBlocks``); attributes use snake_case.
"""

from __future__ import annotations

from array import array
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal


FieldName = Literal["title", "content", "section", "code"]

FIELD_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "title": 10.0,
        "code": 3.0,
        "section": 2.0,
        "content": 1.0,
    }
)

CONTENT_WEIGHT = FIELD_WEIGHTS["content"]


class IndexFormatError(ValueError):
    """Raised when serialized index data is unreadable or structurally invalid."""


def field_weight(field_name: str) -> float:
    """Return the weight for a field, defaulting to the content weight."""

    return FIELD_WEIGHTS.get(field_name, CONTENT_WEIGHT)


@dataclass(frozen=True)
class Posting:
    """A posting represents a term occurrence set in one field of a document."""

    doc_id: str
    tf: int = 0
    positions: array[int] = field(default_factory=lambda: array("I"))
    field: FieldName = "content"

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "docId": self.doc_id,
            "tf": self.tf,
            "positions": list(self.positions) if self.positions else [],
            "field": self.field,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Posting:
        """Create from the wire representation."""
        try:
            doc_id = str(data["docId"])
        except KeyError as exc:
            raise IndexFormatError(f"Posting is missing 'docId': {dict(data)!r}") from exc
        field_name = data.get("field", "content")
        if field_name not in FIELD_WEIGHTS:
            msg = f"Unknown posting field '{field_name}'. Available: {sorted(FIELD_WEIGHTS)}"
            raise IndexFormatError(msg)
        try:
            positions = array("I", data.get("positions", []))
        except (TypeError, OverflowError) as exc:
            raise IndexFormatError(f"Invalid positions for posting of {doc_id}") from exc
        return cls(doc_id=doc_id, tf=int(data.get("tf", 0)), positions=positions, field=field_name)


@dataclass(frozen=True)
class TermInfo:
    """Document frequency plus the postings of a single term."""

    df: int
    postings: tuple[Posting, ...] = ()

    def doc_ids(self) -> set[str]:
        return {posting.doc_id for posting in self.postings}

    def to_dict(self) -> dict[str, Any]:
        return {"df": self.df, "postings": [posting.to_dict() for posting in self.postings]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TermInfo:
        postings = tuple(Posting.from_dict(item) for item in data.get("postings", []))
        df = data.get("df")
        if df is None:
            df = len({posting.doc_id for posting in postings})
        return cls(df=int(df), postings=postings)


@dataclass(frozen=True)
class ArticleInfo:
    """Display metadata and length statistics for one article."""

    id: str
    title: str
    path: str
    sections: tuple[str, ...] = ()
    code_blocks: tuple[str, ...] = ()
    word_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "path": self.path,
            "sections": list(self.sections),
            "codeBlocks": list(self.code_blocks),
            "wordCount": self.word_count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, doc_id: str | None = None) -> ArticleInfo:
        article_id = data.get("id", doc_id)
        if article_id is None:
            raise IndexFormatError(f"Article is missing 'id': {dict(data)!r}")
        return cls(
            id=str(article_id),
            title=str(data.get("title", "")),
            path=str(data.get("path", doc_id or article_id)),
            sections=tuple(str(section) for section in data.get("sections", [])),
            code_blocks=tuple(str(block) for block in data.get("codeBlocks", [])),
            word_count=int(data.get("wordCount", 0)),
        )


@dataclass(frozen=True)
class SearchIndex:
    """Immutable inverted index: term postings plus article metadata."""

    terms: Mapping[str, TermInfo] = field(default_factory=dict)
    articles: Mapping[str, ArticleInfo] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "terms", MappingProxyType(dict(self.terms)))
        object.__setattr__(self, "articles", MappingProxyType(dict(self.articles)))

    @property
    def article_count(self) -> int:
        return len(self.articles)

    def to_dict(self) -> dict[str, Any]:
        return {
            "terms": {term: info.to_dict() for term, info in self.terms.items()},
            "articles": {doc_id: article.to_dict() for doc_id, article in self.articles.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchIndex:
        if not isinstance(data, Mapping):
            raise IndexFormatError(f"Search index must be a mapping, got {type(data).__name__}")
        missing = [key for key in ("terms", "articles") if key not in data]
        if missing:
            raise IndexFormatError(f"Search index is missing keys: {missing}")
        try:
            terms = {str(term): TermInfo.from_dict(info) for term, info in data["terms"].items()}
            articles = {
                str(doc_id): ArticleInfo.from_dict(article, doc_id=str(doc_id))
                for doc_id, article in data["articles"].items()
            }
        except IndexFormatError:
            raise
        except (AttributeError, TypeError, ValueError) as exc:
            raise IndexFormatError(f"Malformed search index: {exc}") from exc
        return cls(terms=terms, articles=articles)
