"""TF-IDF ranking with field weights over a precomputed inverted index."""

from __future__ import annotations

from collections.abc import Mapping
import logging

from offline_docs_search.domain.search import SearchResult
from offline_docs_search.search.analyzers import tokenize
from offline_docs_search.search.models import CONTENT_WEIGHT, SearchIndex
from offline_docs_search.search.query_parser import ParsedQuery, parse_query
from offline_docs_search.search.retrieval import PostingsRetriever
from offline_docs_search.search.snippet import DEFAULT_EXCERPT_CHARS, build_excerpt, highlight_result


logger = logging.getLogger(__name__)


class TfIdfSearchEngine:
    """Rank articles for a raw query string.

    Plain terms, phrases and field boosts add to a per-article score.
    Exclusions are applied only after every positive merge, so an excluded
    article can never re-enter the result set.
    """

    def __init__(self, index: SearchIndex, *, excerpt_max_chars: int = DEFAULT_EXCERPT_CHARS) -> None:
        self.index = index
        self.retriever = PostingsRetriever(index)
        self.excerpt_max_chars = excerpt_max_chars

    def search(self, query: str, max_results: int) -> list[SearchResult]:
        """Return at most ``max_results`` results ranked by descending score."""

        parsed = parse_query(query)
        terms = tokenize(parsed.query)
        if not terms and not parsed.operators:
            return []

        accumulator = self._score(parsed, terms)
        if max_results <= 0 or not accumulator:
            return []

        # sorted() is stable, so equal scores keep first-insertion order
        ranked = sorted(accumulator.values(), key=lambda result: result.score, reverse=True)[:max_results]

        logger.debug(
            "Ranked %d of %d candidates for %d terms and %d operators",
            len(ranked),
            len(accumulator),
            len(terms),
            len(parsed.operators),
        )
        return [self._decorate(result, parsed.query) for result in ranked]

    def _score(self, parsed: ParsedQuery, terms: list[str]) -> dict[str, SearchResult]:
        accumulator: dict[str, SearchResult] = {}

        for term in terms:
            self._merge(accumulator, self.retriever.search_term(term), CONTENT_WEIGHT)

        excluded_terms: list[str] = []
        for operator in parsed.operators:
            if operator.type == "phrase":
                self._merge(accumulator, self.retriever.search_phrase(operator.value), CONTENT_WEIGHT)
            elif operator.type == "boost":
                boosted = self.retriever.search_term(operator.value.lower(), field=operator.field)
                self._merge(accumulator, boosted, operator.boost or CONTENT_WEIGHT)
            elif operator.type == "exclude":
                excluded_terms.append(operator.value.lower())

        for term in excluded_terms:
            for doc_id in self.retriever.documents_with_term(term):
                accumulator.pop(doc_id, None)

        return accumulator

    def _merge(self, accumulator: dict[str, SearchResult], scores: Mapping[str, float], weight: float) -> None:
        for doc_id, score in scores.items():
            weighted = score * weight
            existing = accumulator.get(doc_id)
            if existing is not None:
                accumulator[doc_id] = existing.model_copy(update={"score": existing.score + weighted})
                continue

            article = self.index.articles.get(doc_id)
            if article is None:
                continue
            accumulator[doc_id] = SearchResult(
                id=doc_id,
                title=article.title,
                path=article.path,
                score=weighted,
                sections=list(article.sections),
                code_blocks=list(article.code_blocks),
            )

    def _decorate(self, result: SearchResult, plain_query: str) -> SearchResult:
        article = self.index.articles[result.id]
        excerpt = build_excerpt(article, self.excerpt_max_chars)
        return result.model_copy(
            update={
                "excerpt": excerpt,
                "highlights": highlight_result(result.title, excerpt, plain_query),
            }
        )
