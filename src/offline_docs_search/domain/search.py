"""Domain models for search results.

Following Cosmic Python principles:
- Value Objects are immutable (frozen=True)
- No infrastructure dependencies

A result is rebuilt from scratch for every query; nothing here is persisted.
"""

from pydantic import BaseModel, ConfigDict, Field


class HighlightSegment(BaseModel):
    """A run of text that is either a matched term or plain text."""

    model_config = ConfigDict(frozen=True)

    text: str
    highlighted: bool = False


class ResultHighlights(BaseModel):
    """Highlight segments for the title and the excerpt of a result."""

    model_config = ConfigDict(frozen=True)

    title: list[HighlightSegment] = Field(default_factory=list)
    content: list[HighlightSegment] = Field(default_factory=list)


class SearchResult(BaseModel):
    """Value object for a single ranked article.

    ``highlights`` stays empty while scores are being merged and is filled in
    once the result survives ranking.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    path: str
    excerpt: str = ""
    score: float = Field(default=0.0, ge=0.0)
    highlights: ResultHighlights = Field(default_factory=ResultHighlights)
    sections: list[str] = Field(default_factory=list)
    code_blocks: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Outcome of a query, carrying an error message instead of raising.

    ``error`` is set when the index is not available or the search failed;
    ``results`` is then empty.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    results: list[SearchResult] = Field(default_factory=list)
    total_results: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
