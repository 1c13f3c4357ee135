"""Artifacts router - generation of the curriculum tree and derived artifacts.

Endpoints:
    POST /api/curricula/{doc_id}/objectives - Regenerate the objective tree from the CP
    POST /api/curricula/{doc_id}/flow - Generate a sequenced flow (ATP)
    POST /api/flows/{doc_id}/allocation - Generate time allocations (PROTA)
    POST /api/flows/{doc_id}/criteria - Generate mastery criteria (KKTP) for a semester
    POST /api/allocations/{doc_id}/schedule - Generate a semester schedule (PROSEM)

Each endpoint loads its source document, runs the generation flow and stores
the result as a new document linked to its owners. Total failures surface as
ArtifactGenerationError and are mapped to 502 by the app; empty sources are
rejected here with 422 before the service is called.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from api.config import Settings, get_settings
from api.dependencies import get_service, get_store
from api.schemas.api_models import AllocationRequest, ArtifactResponse, SemesterRequest
from planner.artifacts.allocation import generate_allocation
from planner.artifacts.criteria import generate_criteria
from planner.artifacts.flow import generate_flow
from planner.artifacts.objectives import generate_objectives
from planner.artifacts.schedule import generate_schedule
from planner.gemini_client import TextGenerator
from planner.models import AllocationRow, CurriculumDocument, SequencedRow
from planner.reconciliation import count_objectives
from planner.storage import ALLOCATIONS, CRITERIA, CURRICULA, FLOWS, SCHEDULES, DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _dump(rows: list[Any]) -> list[dict[str, Any]]:
    return [row.model_dump(by_alias=True) for row in rows]


def _flow_rows(flow: dict[str, Any]) -> list[SequencedRow]:
    return [SequencedRow.model_validate(r) for r in flow.get("content", [])]


# -----------------------------------------------------------------------------
# Curriculum
# -----------------------------------------------------------------------------


@router.post("/curricula/{doc_id}/objectives", response_model=ArtifactResponse)
def generate_curriculum_objectives(
    doc_id: str,
    store: DocumentStore = Depends(get_store),
    service: TextGenerator = Depends(get_service),
) -> ArtifactResponse:
    """Replace the objective tree; artifacts derived from the old tree are deleted."""
    curriculum = CurriculumDocument.model_validate(store.get(CURRICULA, doc_id))
    if not any(e.cp.strip() for e in curriculum.cp_elements):
        raise HTTPException(status_code=422, detail="Curriculum has no CP text to generate from")

    result = generate_objectives(
        service,
        curriculum.cp_elements,
        curriculum.grade,
        additional_notes=curriculum.additional_notes,
    )
    removed = store.delete_dependents(CURRICULA, doc_id)
    if removed:
        logger.info("Removed %d artifacts derived from the previous tree", removed)
    tree = result.tree.model_dump(by_alias=True)
    updated = store.update(CURRICULA, doc_id, {"tpGroups": tree["tpGroups"]})
    return ArtifactResponse(document=updated, warnings=result.warnings)


@router.post("/curricula/{doc_id}/flow", response_model=ArtifactResponse)
def generate_curriculum_flow(
    doc_id: str,
    store: DocumentStore = Depends(get_store),
    service: TextGenerator = Depends(get_service),
) -> ArtifactResponse:
    curriculum = CurriculumDocument.model_validate(store.get(CURRICULA, doc_id))
    if count_objectives(curriculum) == 0:
        raise HTTPException(status_code=422, detail="Curriculum has no objectives to sequence")

    result = generate_flow(service, curriculum, subject=curriculum.subject, grade=curriculum.grade)
    document = store.create(
        FLOWS,
        {
            "tpId": doc_id,
            "subject": curriculum.subject,
            "grade": curriculum.grade,
            "content": _dump(result.rows),
        },
    )
    return ArtifactResponse(document=document, warnings=result.warnings, strategy=result.strategy.value)


# -----------------------------------------------------------------------------
# Flow-derived artifacts
# -----------------------------------------------------------------------------


@router.post("/flows/{doc_id}/allocation", response_model=ArtifactResponse)
def generate_flow_allocation(
    doc_id: str,
    request: AllocationRequest,
    store: DocumentStore = Depends(get_store),
    service: TextGenerator = Depends(get_service),
) -> ArtifactResponse:
    flow = store.get(FLOWS, doc_id)
    rows = _flow_rows(flow)
    if not rows:
        raise HTTPException(status_code=422, detail="Flow has no rows to allocate time to")

    result = generate_allocation(service, rows, request.weekly_hours, subject=flow.get("subject", ""))
    document = store.create(
        ALLOCATIONS,
        {
            "tpId": flow.get("tpId"),
            "atpId": doc_id,
            "subject": flow.get("subject", ""),
            "grade": flow.get("grade", ""),
            "jamPertemuan": request.weekly_hours,
            "content": _dump(result.rows),
        },
    )
    return ArtifactResponse(document=document, warnings=result.warnings, substituted=result.substituted)


@router.post("/flows/{doc_id}/criteria", response_model=ArtifactResponse)
def generate_flow_criteria(
    doc_id: str,
    request: SemesterRequest,
    store: DocumentStore = Depends(get_store),
    service: TextGenerator = Depends(get_service),
    settings: Settings = Depends(get_settings),
) -> ArtifactResponse:
    flow = store.get(FLOWS, doc_id)
    result = generate_criteria(
        service,
        _flow_rows(flow),
        request.semester,
        subject=flow.get("subject", ""),
        grade=flow.get("grade", ""),
        chunk_size=settings.chunk_size,
        pacing_seconds=settings.pacing_seconds,
    )
    document = store.create(
        CRITERIA,
        {
            "tpId": flow.get("tpId"),
            "atpId": doc_id,
            "subject": flow.get("subject", ""),
            "grade": flow.get("grade", ""),
            "semester": request.semester,
            "content": _dump(result.rows),
        },
    )
    return ArtifactResponse(document=document, warnings=result.warnings, substituted=result.defaulted_positions)


# -----------------------------------------------------------------------------
# Allocation-derived artifacts
# -----------------------------------------------------------------------------


@router.post("/allocations/{doc_id}/schedule", response_model=ArtifactResponse)
def generate_allocation_schedule(
    doc_id: str,
    request: SemesterRequest,
    store: DocumentStore = Depends(get_store),
    service: TextGenerator = Depends(get_service),
) -> ArtifactResponse:
    allocation = store.get(ALLOCATIONS, doc_id)
    rows = [AllocationRow.model_validate(r) for r in allocation.get("content", [])]
    wanted = request.semester.lower()
    if not any(row.semester.strip().lower() == wanted for row in rows):
        raise HTTPException(status_code=422, detail=f"No allocation rows for semester {request.semester}")

    result = generate_schedule(service, rows, request.semester)
    document = store.create(
        SCHEDULES,
        {
            "tpId": allocation.get("tpId"),
            "protaId": doc_id,
            "subject": allocation.get("subject", ""),
            "grade": allocation.get("grade", ""),
            "semester": result.semester,
            "headers": _dump(result.headers),
            "content": _dump(result.rows),
        },
    )
    return ArtifactResponse(document=document, warnings=result.warnings)
