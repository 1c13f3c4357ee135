"""Documents router - CRUD over the stored collections.

Endpoints:
    GET    /api/documents/{collection} - List documents (newest first)
    POST   /api/documents/{collection} - Create a document
    GET    /api/documents/{collection}/{doc_id} - Get one document
    PATCH  /api/documents/{collection}/{doc_id} - Merge changes into a document
    DELETE /api/documents/{collection}/{doc_id} - Delete a document and its derived artifacts
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from api.dependencies import get_store
from api.schemas.api_models import DeleteResponse
from planner.models import CurriculumDocument
from planner.storage import COLLECTIONS, CURRICULA, OWNER_KEYS, DocumentStore

router = APIRouter()


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise HTTPException(status_code=404, detail=f"Collection '{collection}' not found")


def _validated(collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Curricula are validated against the document model; artifacts are stored as given."""
    if collection != CURRICULA:
        return data
    try:
        document = CurriculumDocument.model_validate(data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return document.model_dump(by_alias=True)


@router.get("/{collection}")
def list_documents(
    collection: str,
    subject: str | None = None,
    owner_id: str | None = None,
    store: DocumentStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """List documents, optionally by subject and by owner (see OWNER_KEYS)."""
    _check_collection(collection)
    if owner_id is not None and OWNER_KEYS[collection] is None:
        raise HTTPException(status_code=400, detail=f"Collection '{collection}' has no owner")
    return store.list(collection, subject=subject, owner_id=owner_id)


@router.post("/{collection}", status_code=201)
def create_document(
    collection: str,
    data: dict[str, Any],
    store: DocumentStore = Depends(get_store),
) -> dict[str, Any]:
    _check_collection(collection)
    return store.create(collection, _validated(collection, data))


@router.get("/{collection}/{doc_id}")
def get_document(
    collection: str,
    doc_id: str,
    store: DocumentStore = Depends(get_store),
) -> dict[str, Any]:
    _check_collection(collection)
    return store.get(collection, doc_id)


@router.patch("/{collection}/{doc_id}")
def update_document(
    collection: str,
    doc_id: str,
    changes: dict[str, Any],
    store: DocumentStore = Depends(get_store),
) -> dict[str, Any]:
    _check_collection(collection)
    if collection == CURRICULA:
        merged = {**store.get(collection, doc_id), **changes}
        changes = _validated(collection, merged)
    return store.update(collection, doc_id, changes)


@router.delete("/{collection}/{doc_id}", response_model=DeleteResponse)
def delete_document(
    collection: str,
    doc_id: str,
    store: DocumentStore = Depends(get_store),
) -> DeleteResponse:
    _check_collection(collection)
    return DeleteResponse(deleted=store.delete(collection, doc_id))
