"""Centralized configuration for offline-docs-search using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every value has a default so the engine runs without any environment set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    search_index_path: Path | None = Field(
        default=None, description="Serialized search index (JSON) loaded at startup"
    )
    search_max_results: int = Field(default=50, ge=1, description="Default page size for ranked results")
    search_history_limit: int = Field(default=10, ge=1, description="Maximum remembered queries")
    search_history_path: Path = Field(
        default=Path(".offline_docs_search/history.json"),
        description="JSON file backing the search history key-value store",
    )
    excerpt_max_chars: int = Field(default=200, ge=10, description="Excerpt length before truncation")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}, got {value!r}")
        return normalized

    @field_validator("search_index_path", mode="before")
    @classmethod
    def _empty_index_path_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
