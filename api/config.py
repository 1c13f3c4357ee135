"""Configuration and settings for the API.

Loads settings from environment variables and provides path constants.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

from planner.models.constants import DEFAULT_CHUNK_SIZE, DEFAULT_PACING_SECONDS
from planner.utils.paths import DOCUMENTS_DIR


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API settings
    api_title: str = "TP Planner API"
    api_version: str = "0.1.0"
    debug: bool = False

    # CORS settings (for frontend dev server)
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Where the JSON document collections are kept
    documents_dir: Path = DOCUMENTS_DIR

    # Criteria batching
    chunk_size: int = DEFAULT_CHUNK_SIZE
    pacing_seconds: float = DEFAULT_PACING_SECONDS

    class Config:
        """Pydantic settings configuration."""

        env_prefix = "PLANNER_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
