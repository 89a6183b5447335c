"""Lightweight in-memory search over raw documents.

A simpler alternative to the TF-IDF ranking engine: it builds its own small
inverted index from document text and matches query terms exactly, by prefix,
or within a length-scaled edit distance. Scoring is per-field BM25 with field
boosts; there are no query operators.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
from typing import Any

from offline_docs_search.observability.metrics import INDEX_DOC_COUNT, SEARCH_LATENCY, SEARCH_QUERIES, track_latency
from offline_docs_search.search.analyzers import get_analyzer
from offline_docs_search.search.fuzzy import (
    DEFAULT_FUZZINESS,
    find_fuzzy_matches,
    find_prefix_matches,
    get_max_edit_distance,
)
from offline_docs_search.search.stats import bm25, bm25_idf, compute_field_length_stats


logger = logging.getLogger(__name__)

ENGINE_LABEL = "mini"

DEFAULT_FIELD_BOOSTS: Mapping[str, float] = {"title": 2.0, "content": 1.0, "sections": 1.5}

# Expanded matches are discounted to prefer exact terms
PREFIX_WEIGHT = 0.375
FUZZY_WEIGHT = 0.45


@dataclass(frozen=True)
class MiniSearchHit:
    """A scored document plus the index terms and fields it matched on."""

    id: str
    title: str
    path: str
    score: float
    match: dict[str, list[str]] = field(default_factory=dict)


def _flatten_sections(sections: Any) -> str:
    if not sections:
        return ""
    parts: list[str] = []
    for section in sections:
        if isinstance(section, Mapping):
            parts.append(f"{section.get('title', '')} {section.get('content', '')}")
        else:
            parts.append(str(section))
    return " ".join(parts)


class MiniSearchEngine:
    """Index documents once, then answer fuzzy/prefix keyword queries."""

    def __init__(
        self,
        *,
        field_boosts: Mapping[str, float] | None = None,
        fuzziness: float = DEFAULT_FUZZINESS,
        prefix: bool = True,
    ) -> None:
        self.field_boosts = dict(field_boosts or DEFAULT_FIELD_BOOSTS)
        self.fuzziness = fuzziness
        self.prefix = prefix
        self.is_indexed = False
        self._analyzer = get_analyzer("all-terms")
        self._postings: dict[str, dict[str, dict[str, int]]] = {name: {} for name in self.field_boosts}
        self._field_lengths: dict[str, dict[str, int]] = {name: {} for name in self.field_boosts}
        self._stored: dict[str, dict[str, str]] = {}

    @property
    def document_count(self) -> int:
        return len(self._stored)

    def index_documents(self, docs: Mapping[str, Mapping[str, Any]]) -> int:
        """Index ``path -> document`` entries; later calls are no-ops.

        Each document may carry ``title``, ``path``, ``content`` and
        ``sections`` (a list of ``{"title", "content"}`` mappings).

        Returns:
            Number of documents indexed by this call.
        """
        if self.is_indexed:
            logger.debug("Mini engine already indexed; ignoring %d documents", len(docs))
            return 0

        for doc_id, doc in docs.items():
            texts = {
                "title": str(doc.get("title", "")),
                "content": str(doc.get("content", "")),
                "sections": _flatten_sections(doc.get("sections")),
            }
            self._stored[doc_id] = {"title": texts["title"], "path": str(doc.get("path", doc_id))}
            for field_name in self.field_boosts:
                tokens = self._analyzer(texts.get(field_name, ""))
                self._field_lengths[field_name][doc_id] = len(tokens)
                postings = self._postings[field_name]
                for token in tokens:
                    doc_freqs = postings.setdefault(token.text, {})
                    doc_freqs[doc_id] = doc_freqs.get(doc_id, 0) + 1

        self.is_indexed = True
        INDEX_DOC_COUNT.labels(engine=ENGINE_LABEL).set(len(self._stored))
        logger.info("Mini engine indexed %d documents", len(self._stored))
        return len(self._stored)

    def search(self, query: str) -> list[MiniSearchHit]:
        """Return hits for ``query`` sorted by descending score."""
        with track_latency(SEARCH_LATENCY, engine=ENGINE_LABEL):
            hits = self._rank(query)
        SEARCH_QUERIES.labels(engine=ENGINE_LABEL, status="ok").inc()
        return hits

    def _rank(self, query: str) -> list[MiniSearchHit]:
        if not query or not self.is_indexed:
            return []

        query_terms = list(dict.fromkeys(token.text for token in self._analyzer(query)))
        if not query_terms:
            return []

        vocabulary = sorted({term for postings in self._postings.values() for term in postings})
        length_stats = compute_field_length_stats(self._field_lengths)
        total_docs = max(self.document_count, 1)

        scores: dict[str, float] = defaultdict(float)
        matches: dict[str, dict[str, list[str]]] = defaultdict(dict)

        for query_term in query_terms:
            for index_term, weight in self._expand(query_term, vocabulary).items():
                for field_name, boost in self.field_boosts.items():
                    doc_freqs = self._postings[field_name].get(index_term)
                    if not doc_freqs:
                        continue
                    idf = bm25_idf(len(doc_freqs), total_docs)
                    avg_length = length_stats[field_name].average_length
                    for doc_id, tf in doc_freqs.items():
                        doc_length = self._field_lengths[field_name].get(doc_id, tf)
                        scores[doc_id] += weight * boost * idf * bm25(tf, doc_length, avg_length)
                        fields = matches[doc_id].setdefault(index_term, [])
                        if field_name not in fields:
                            fields.append(field_name)

        ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
        return [
            MiniSearchHit(
                id=doc_id,
                title=self._stored[doc_id]["title"],
                path=self._stored[doc_id]["path"],
                score=score,
                match=matches[doc_id],
            )
            for doc_id, score in ranked
        ]

    def _expand(self, query_term: str, vocabulary: list[str]) -> dict[str, float]:
        expansions: dict[str, float] = {query_term: 1.0}

        if self.prefix:
            for term in find_prefix_matches(query_term, vocabulary):
                # Longer completions weigh less
                weight = PREFIX_WEIGHT * len(query_term) / len(term)
                expansions[term] = max(expansions.get(term, 0.0), weight)

        max_distance = get_max_edit_distance(len(query_term), self.fuzziness)
        if max_distance:
            for term, distance in find_fuzzy_matches(query_term, vocabulary, max_distance):
                if distance == 0:
                    continue
                weight = FUZZY_WEIGHT * len(query_term) / (len(query_term) + distance)
                expansions[term] = max(expansions.get(term, 0.0), weight)

        return expansions
