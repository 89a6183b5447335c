"""Excerpt generation and term highlighting for search results.

Highlighting splits text into segments that concatenate back to the exact
input. Terms are applied in query order; text already claimed by an earlier
term is never split again.
"""

from __future__ import annotations

import re

from offline_docs_search.domain.search import HighlightSegment, ResultHighlights
from offline_docs_search.search.analyzers import tokenize
from offline_docs_search.search.models import ArticleInfo


DEFAULT_EXCERPT_CHARS = 200
ELLIPSIS = "..."


def build_excerpt(article: ArticleInfo, max_chars: int = DEFAULT_EXCERPT_CHARS) -> str:
    """Return a bounded preview for an article.

    The index carries no body text, so the preview is derived from the title
    and truncated with an ellipsis when longer than ``max_chars``.
    """
    text = article.title
    if len(text) > max_chars:
        return text[:max_chars] + ELLIPSIS
    return text


def _split_segment(segment: HighlightSegment, pattern: re.Pattern[str]) -> list[HighlightSegment]:
    if segment.highlighted:
        return [segment]

    # The capturing group keeps matches at odd indices
    parts = pattern.split(segment.text)
    pieces: list[HighlightSegment] = []
    for idx, part in enumerate(parts):
        if not part:
            continue
        pieces.append(HighlightSegment(text=part, highlighted=idx % 2 == 1))
    return pieces


def highlight_text(text: str, query: str) -> list[HighlightSegment]:
    """Split ``text`` into highlighted and plain segments for ``query`` terms.

    Args:
        text: Text to decorate.
        query: Plain-term query; operators should already be stripped.

    Returns:
        Segments whose texts join back to ``text``. A single plain segment is
        returned when the query has no terms.
    """
    terms = tokenize(query)
    if not terms:
        return [HighlightSegment(text=text, highlighted=False)]

    segments = [HighlightSegment(text=text, highlighted=False)]
    for term in terms:
        pattern = re.compile(f"({re.escape(term)})", re.IGNORECASE)
        segments = [piece for segment in segments for piece in _split_segment(segment, pattern)]

    if not segments:
        return [HighlightSegment(text=text, highlighted=False)]
    return segments


def highlight_result(title: str, excerpt: str, query: str) -> ResultHighlights:
    """Build title and excerpt highlights for one result."""
    return ResultHighlights(
        title=highlight_text(title, query),
        content=highlight_text(excerpt, query),
    )
