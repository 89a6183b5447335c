"""Contiguous phrase matching over positional postings.

A phrase occurs at position ``p`` when the first term is at ``p`` and the
``i``-th term of the phrase is at ``p + i`` for every following term.
"""

from __future__ import annotations

from collections.abc import Sequence


def find_phrase_starts(position_lists: Sequence[Sequence[int]]) -> list[int]:
    """Return every start position where the terms occur contiguously.

    Args:
        position_lists: Positions of each phrase term, in phrase order.

    Returns:
        Matching start positions in ascending order; empty if any term has
        no positions.

    Examples:
        >>> find_phrase_starts([[4, 10], [5, 12]])
        [4]
        >>> find_phrase_starts([[4], [9]])
        []
    """
    if not position_lists or any(not positions for positions in position_lists):
        return []

    # Positions of every following term, for O(1) lookups
    following = [frozenset(positions) for positions in position_lists[1:]]

    starts: list[int] = []
    for start in sorted(set(position_lists[0])):
        if all(start + offset in positions for offset, positions in enumerate(following, start=1)):
            starts.append(start)
    return starts
