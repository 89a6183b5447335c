"""Scoring arithmetic shared by the TF-IDF ranker and the mini engine.

Nothing here knows about index structures: callers pass plain counts.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import math


BM25_K1 = 1.2
BM25_B = 0.7
BM25_DELTA = 0.5


def inverse_document_frequency(doc_freq: int, total_docs: int) -> float:
    """``ln(total_docs / doc_freq)``, never negative.

    >>> inverse_document_frequency(4, 4)
    0.0
    """
    if doc_freq <= 0 or total_docs <= 0 or doc_freq >= total_docs:
        return 0.0
    return math.log(total_docs / doc_freq)


def normalized_tf(tf: int, word_count: int) -> float:
    """Share of a document's words taken by one term."""
    if word_count <= 0:
        raise ValueError(f"word_count must be positive, got {word_count}")
    return tf / word_count


@dataclass(frozen=True)
class FieldLengthStats:
    field: str
    total_terms: int
    document_count: int

    @property
    def average_length(self) -> float:
        return self.total_terms / self.document_count if self.document_count else 0.0


def compute_field_length_stats(field_lengths: Mapping[str, Mapping[str, int]]) -> dict[str, FieldLengthStats]:
    """Summarize per-document field lengths, keyed by field name."""
    return {
        name: FieldLengthStats(name, sum(max(n, 0) for n in per_doc.values()), len(per_doc))
        for name, per_doc in field_lengths.items()
    }


def bm25_idf(doc_freq: int, total_docs: int) -> float:
    """Smoothed BM25 idf, ``ln(1 + (N - df + 0.5) / (df + 0.5))``.

    Always positive, even for a term present in every document.
    """
    if total_docs <= 0:
        return 0.0
    df = min(max(doc_freq, 0), total_docs)
    return math.log1p((total_docs - df + 0.5) / (df + 0.5))


def bm25(
    tf: int,
    doc_length: int,
    avg_doc_length: float,
    *,
    k1: float = BM25_K1,
    b: float = BM25_B,
    delta: float = BM25_DELTA,
) -> float:
    """BM25+ term weight, excluding idf; zero when the term is absent."""
    if tf <= 0:
        return 0.0
    length_ratio = doc_length / avg_doc_length if avg_doc_length > 0 else 1.0
    saturation = tf + k1 * (1 - b + b * length_ratio)
    return delta + tf * (k1 + 1) / saturation
