"""Term and phrase retrieval against a loaded search index."""

from __future__ import annotations

import logging

from offline_docs_search.search.analyzers import tokenize
from offline_docs_search.search.models import CONTENT_WEIGHT, SearchIndex, field_weight
from offline_docs_search.search.phrase import find_phrase_starts
from offline_docs_search.search.stats import inverse_document_frequency, normalized_tf


logger = logging.getLogger(__name__)


class PostingsRetriever:
    """Look up term postings and verify phrase adjacency.

    The index is read-only, so one retriever may serve concurrent queries.
    """

    def __init__(self, index: SearchIndex) -> None:
        self.index = index
        # Total corpus size, fixed for the lifetime of the index
        self.total_articles = index.article_count
        self._reported_anomalies: set[tuple[str, str]] = set()

    def search_term(self, term: str, *, field: str | None = None) -> dict[str, float]:
        """Return ``doc_id -> partial TF-IDF score`` for a single term.

        Args:
            term: Normalized term to look up.
            field: Restrict scoring to postings of this field when given.

        Returns:
            Scores summed across the matching postings of each document; empty
            when the term is not indexed.
        """
        term_info = self.index.terms.get(term)
        if term_info is None:
            return {}

        if term_info.df <= 0:
            self._report_anomaly(term, "", "term has a non-positive document frequency")
            return {}

        idf = inverse_document_frequency(term_info.df, self.total_articles)
        scores: dict[str, float] = {}
        for posting in term_info.postings:
            if field is not None and posting.field != field:
                continue
            article = self.index.articles.get(posting.doc_id)
            if article is None:
                self._report_anomaly(term, posting.doc_id, "posting references a missing article")
                continue
            if article.word_count <= 0:
                self._report_anomaly(term, posting.doc_id, "article has a zero word count")
                continue

            contribution = normalized_tf(posting.tf, article.word_count) * idf * field_weight(posting.field)
            if contribution <= 0:
                continue
            scores[posting.doc_id] = scores.get(posting.doc_id, 0.0) + contribution
        return scores

    def search_phrase(self, phrase: str) -> dict[str, float]:
        """Return ``doc_id -> score`` for documents containing the exact phrase.

        The score is the number of phrase occurrences times the content weight.
        Documents without an occurrence are left out.
        """
        terms = tokenize(phrase)
        if not terms:
            return {}

        candidates = self._documents_with_all_terms(terms)
        scores: dict[str, float] = {}
        for doc_id in candidates:
            position_lists = [self._term_positions(term, doc_id) for term in terms]
            occurrences = len(find_phrase_starts(position_lists))
            if occurrences:
                scores[doc_id] = occurrences * CONTENT_WEIGHT
        return scores

    def documents_with_term(self, term: str) -> set[str]:
        """Return every document that has any posting for ``term``."""
        term_info = self.index.terms.get(term)
        if term_info is None:
            return set()
        return term_info.doc_ids()

    def _documents_with_all_terms(self, terms: list[str]) -> list[str]:
        candidates: list[str] | None = None
        for term in terms:
            term_info = self.index.terms.get(term)
            if term_info is None:
                return []
            term_docs = term_info.doc_ids()
            if candidates is None:
                # First term's posting order
                candidates = list(dict.fromkeys(posting.doc_id for posting in term_info.postings))
            else:
                candidates = [doc_id for doc_id in candidates if doc_id in term_docs]
            if not candidates:
                return []
        return [doc_id for doc_id in candidates or [] if doc_id in self.index.articles]

    def _term_positions(self, term: str, doc_id: str) -> list[int]:
        # Positions are document-wide, so occurrences from every field are merged
        term_info = self.index.terms.get(term)
        if term_info is None:
            return []
        positions: set[int] = set()
        for posting in term_info.postings:
            if posting.doc_id == doc_id:
                positions.update(posting.positions)
        return sorted(positions)

    def _report_anomaly(self, term: str, doc_id: str, reason: str) -> None:
        key = (term, doc_id)
        if key in self._reported_anomalies:
            return
        self._reported_anomalies.add(key)
        logger.warning("Skipping malformed index entry for term %r (doc %r): %s", term, doc_id, reason)
