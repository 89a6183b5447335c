"""Typo-tolerant and prefix term expansion for the mini engine.

A term of length ``n`` may differ from a vocabulary term by
``round(n * fuzziness)`` edits; at the default fuzziness of 0.2 that is one
edit for 3-7 characters and two for 8-12.
"""

from __future__ import annotations

from collections.abc import Iterable
import math


DEFAULT_FUZZINESS = 0.2
MAX_FUZZY_DISTANCE = 6


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Edit distance between two strings.

    With ``max_distance`` set, any result above it is reported as
    ``max_distance + 1`` and the computation stops as soon as that is certain.

    >>> levenshtein_distance("kitten", "sitting")
    3
    >>> levenshtein_distance("abcdef", "uvwxyz", max_distance=1)
    2
    """
    short, long = sorted((s1, s2), key=len)
    ceiling = math.inf if max_distance is None else max_distance
    if len(long) - len(short) > ceiling:
        return max_distance + 1  # type: ignore[operator]

    row = list(range(len(short) + 1))
    for row_index, long_char in enumerate(long, start=1):
        above = row
        row = [row_index]
        for col_index, short_char in enumerate(short, start=1):
            row.append(
                min(
                    above[col_index] + 1,
                    row[-1] + 1,
                    above[col_index - 1] + (short_char != long_char),
                )
            )
        if min(row) > ceiling:
            return max_distance + 1  # type: ignore[operator]
    return row[-1]


def get_max_edit_distance(term_length: int, fuzziness: float = DEFAULT_FUZZINESS) -> int:
    """Edit budget for a term, rounding half up and capped at ``MAX_FUZZY_DISTANCE``."""
    if term_length <= 0 or fuzziness <= 0:
        return 0
    return min(int(term_length * fuzziness + 0.5), MAX_FUZZY_DISTANCE)


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Iterable[str],
    max_distance: int | None = None,
) -> list[tuple[str, int]]:
    """``(term, distance)`` for every vocabulary term within budget.

    Ordered by distance, then alphabetically; an exact hit has distance 0.
    """
    needle = query_term.lower()
    if not needle:
        return []
    budget = get_max_edit_distance(len(needle)) if max_distance is None else max_distance

    found = []
    for term in vocabulary:
        candidate = term.lower()
        if abs(len(candidate) - len(needle)) <= budget:
            distance = levenshtein_distance(needle, candidate, budget)
            if distance <= budget:
                found.append((term, distance))
    return sorted(found, key=lambda hit: (hit[1], hit[0].lower()))


def find_prefix_matches(prefix: str, vocabulary: Iterable[str]) -> list[str]:
    """Vocabulary terms extending ``prefix``; the prefix itself is left out."""
    stem = prefix.lower()
    if not stem:
        return []
    return sorted(term for term in vocabulary if term != stem and term.startswith(stem))
