"""Persistence of curriculum documents and derived artifacts."""

from planner.storage.document_store import (
    ALLOCATIONS,
    CASCADES,
    COLLECTIONS,
    CRITERIA,
    CURRICULA,
    FLOWS,
    OWNER_KEYS,
    SCHEDULES,
    DocumentStore,
)

__all__ = [
    "DocumentStore",
    "COLLECTIONS",
    "OWNER_KEYS",
    "CASCADES",
    "CURRICULA",
    "FLOWS",
    "ALLOCATIONS",
    "CRITERIA",
    "SCHEDULES",
]
