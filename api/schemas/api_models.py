"""Pydantic models for API requests and responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from planner.models.curriculum import normalize_semester
from planner.models.constants import VALID_SEMESTERS


# -----------------------------------------------------------------------------
# Generic action proxy
# -----------------------------------------------------------------------------


class GenerateRequest(BaseModel):
    """Body of POST /api/generate."""

    action: str = Field(description="Action tag, e.g. generateATP")
    payload: dict[str, Any] = Field(default_factory=dict)


class GenerateResponse(BaseModel):
    """Raw, untrusted service text."""

    text: str


# -----------------------------------------------------------------------------
# Documents
# -----------------------------------------------------------------------------


class DeleteResponse(BaseModel):
    deleted: int = Field(description="Documents removed, cascades included")


# -----------------------------------------------------------------------------
# Artifact generation
# -----------------------------------------------------------------------------


class SemesterRequest(BaseModel):
    """Body for semester-scoped generation (criteria, schedule)."""

    semester: str

    @field_validator("semester")
    @classmethod
    def validate_semester(cls, v: str) -> str:
        label = normalize_semester(v)
        if label is None:
            msg = f"semester must be one of {VALID_SEMESTERS}, got '{v}'"
            raise ValueError(msg)
        return label


class AllocationRequest(BaseModel):
    """Body of POST /api/flows/{id}/allocation."""

    model_config = ConfigDict(populate_by_name=True)

    weekly_hours: int = Field(..., ge=1, alias="jamPertemuan")


class ArtifactResponse(BaseModel):
    """A stored artifact document plus generation diagnostics."""

    document: dict[str, Any]
    warnings: list[str] = Field(default_factory=list)
    strategy: str | None = Field(default=None, description="Flow reconciliation strategy")
    substituted: list[int] = Field(default_factory=list, description="Rows replaced by a default")
