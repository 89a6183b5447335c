"""Query operator extraction.

Operators are pulled out of the raw query in a fixed order (phrase, exclude,
title boost, code boost). Every pass scans the original query, and each
match's span is cut from the residual so a token is never processed both as
an operator value and as a plain term.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Literal

from offline_docs_search.search.models import FIELD_WEIGHTS


OperatorType = Literal["phrase", "exclude", "boost"]

PHRASE_PATTERN = re.compile(r'"([^"]+)"')
EXCLUDE_PATTERN = re.compile(r"-(\w+)")
TITLE_BOOST_PATTERN = re.compile(r"title:(\w+)")
CODE_BOOST_PATTERN = re.compile(r"code:(\w+)")


@dataclass(frozen=True)
class QueryOperator:
    """A structured operator extracted from the raw query."""

    type: OperatorType
    value: str
    boost: float | None = None
    field: str | None = None


@dataclass(frozen=True)
class ParsedQuery:
    """Residual plain-term query plus extracted operators."""

    query: str
    operators: tuple[QueryOperator, ...] = field(default_factory=tuple)


_BOOST_PASSES: tuple[tuple[re.Pattern[str], str], ...] = (
    (TITLE_BOOST_PATTERN, "title"),
    (CODE_BOOST_PATTERN, "code"),
)


def _cut_spans(text: str, spans: list[tuple[int, int]]) -> str:
    keep = [True] * len(text)
    for start, end in spans:
        keep[start:end] = [False] * (end - start)
    return "".join(char for char, kept in zip(text, keep) if kept)


def parse_query(raw: str) -> ParsedQuery:
    """Split ``raw`` into operators and the residual plain-term query."""

    operators: list[QueryOperator] = []
    spans: list[tuple[int, int]] = []

    for match in PHRASE_PATTERN.finditer(raw):
        operators.append(QueryOperator(type="phrase", value=match.group(1)))
        spans.append(match.span())

    for match in EXCLUDE_PATTERN.finditer(raw):
        operators.append(QueryOperator(type="exclude", value=match.group(1)))
        spans.append(match.span())

    for pattern, field_name in _BOOST_PASSES:
        for match in pattern.finditer(raw):
            operators.append(
                QueryOperator(
                    type="boost",
                    value=match.group(1),
                    boost=FIELD_WEIGHTS[field_name],
                    field=field_name,
                )
            )
            spans.append(match.span())

    return ParsedQuery(query=_cut_spans(raw, spans).strip(), operators=tuple(operators))
