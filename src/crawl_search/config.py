"""Centralized configuration for crawl-search using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Values are validated at startup so a bad deployment fails fast instead of
    surfacing as a confusing search error later.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Store
    crawl_db_path: Path = Field(default=Path("crawler.db"), description="SQLite file holding pages, tokens and phrases")

    # Search settings
    search_result_limit: int = Field(default=50, ge=1, description="Maximum ranked candidates kept per search")
    suggestion_limit: int = Field(default=50, ge=1, description="Maximum phrases fetched per suggestion query")
    trigram_threshold: int = Field(
        default=3,
        ge=1,
        description="Queries with more tokens than this are folded into trigrams",
    )
    backend_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-call deadline for index lookups and document hydration",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    service_name: str = Field(default="crawl-search", description="Service name reported to tracing")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"debug", "info", "warning", "error", "critical"}:
            raise ValueError(f"Unknown log level '{value}'")
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide settings, loading them once."""
    return Settings()
