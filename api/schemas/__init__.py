"""API schemas package - Pydantic models for request/response."""

from api.schemas.api_models import (
    AllocationRequest,
    ArtifactResponse,
    DeleteResponse,
    GenerateRequest,
    GenerateResponse,
    SemesterRequest,
)

__all__ = [
    "AllocationRequest",
    "ArtifactResponse",
    "DeleteResponse",
    "GenerateRequest",
    "GenerateResponse",
    "SemesterRequest",
]
