"""Shared FastAPI dependencies.

Routers receive the document store and the generative service through
`Depends`, so tests can swap them with `app.dependency_overrides`.
"""

from __future__ import annotations

from functools import lru_cache

from api.config import get_settings
from planner.gemini_client import TextGenerator, load_default_service
from planner.storage import DocumentStore


@lru_cache
def get_store() -> DocumentStore:
    """Get the document store rooted at the configured directory."""
    return DocumentStore(get_settings().documents_dir)


@lru_cache
def get_service() -> TextGenerator:
    """Get the configured generative service (created on first use)."""
    return load_default_service()
