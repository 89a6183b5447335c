"""Text analysis shared by the index, the query parser and the highlighter.

An analyzer is a tokenizer followed by zero or more filters, each a callable
over a token stream. The standard chain lower-cases, splits on anything that
is not a word character and keeps terms of three characters or more; there is
no stemming and no stopword list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, replace
import re


MIN_TERM_LENGTH = 3

WORD_PATTERN = re.compile(r"\w+")


@dataclass(frozen=True)
class Token:
    text: str
    position: int
    start_char: int
    end_char: int


TokenStream = Iterator[Token]
TokenFilter = Callable[[Iterable[Token]], TokenStream]


class RegexTokenizer:
    """Split text into word runs, recording their character offsets."""

    def __init__(self, pattern: re.Pattern[str] = WORD_PATTERN) -> None:
        self.pattern = pattern

    def __call__(self, text: str) -> TokenStream:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(match.group(), position, match.start(), match.end())


class MinLengthFilter:
    def __init__(self, min_length: int = MIN_TERM_LENGTH) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> TokenStream:
        return (token for token in tokens if len(token.text) >= self.min_length)


class StandardAnalyzer:
    """Lower-case, tokenize, filter, then number the survivors from zero.

    Offsets refer to the lower-cased text.
    """

    def __init__(
        self,
        *,
        min_length: int = MIN_TERM_LENGTH,
        tokenizer: RegexTokenizer | None = None,
        filters: Iterable[TokenFilter] | None = None,
    ) -> None:
        self.tokenizer = tokenizer or RegexTokenizer()
        self.filters: list[TokenFilter] = [MinLengthFilter(min_length), *(filters or ())]

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text.lower())
        for apply_filter in self.filters:
            stream = apply_filter(stream)
        return [replace(token, position=index) for index, token in enumerate(stream)]


ANALYZERS: dict[str, Callable[[], StandardAnalyzer]] = {
    "standard": StandardAnalyzer,
    "all-terms": lambda: StandardAnalyzer(min_length=1),
}

_standard = StandardAnalyzer()


def get_analyzer(name: str | None = None) -> StandardAnalyzer:
    """Build the named analyzer; ``None`` means the standard one."""
    key = (name or "standard").lower()
    try:
        factory = ANALYZERS[key]
    except KeyError:
        raise ValueError(f"Unknown analyzer '{name}'. Available: {sorted(ANALYZERS)}") from None
    return factory()


def tokenize(text: str) -> list[str]:
    """Search terms of ``text``, left to right, duplicates kept."""
    return [token.text for token in _standard(text)] if text else []
