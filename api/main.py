"""FastAPI application entry point.

Run with:
    uvicorn api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.config import get_settings
from api.routers import artifacts, documents, generate
from planner.errors import (
    ArtifactGenerationError,
    DocumentNotFoundError,
    MalformedResponse,
    UnknownActionError,
)

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Curriculum planning API: objective trees, flows, allocations, criteria and schedules.",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Configure CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(documents.router, prefix="/api/documents", tags=["Documents"])
app.include_router(artifacts.router, prefix="/api", tags=["Artifacts"])
app.include_router(generate.router, prefix="/api", tags=["Generate"])


# -----------------------------------------------------------------------------
# Error mapping
# -----------------------------------------------------------------------------


@app.exception_handler(DocumentNotFoundError)
async def document_not_found_handler(request: Request, exc: DocumentNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def stored_document_invalid_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """A stored source document no longer has the shape generation needs."""
    logger.warning("Invalid stored document for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": f"Invalid source document: {exc}"})


@app.exception_handler(UnknownActionError)
async def unknown_action_handler(request: Request, exc: UnknownActionError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ArtifactGenerationError)
async def generation_error_handler(request: Request, exc: ArtifactGenerationError) -> JSONResponse:
    logger.error("Generation failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(MalformedResponse)
async def malformed_response_handler(request: Request, exc: MalformedResponse) -> JSONResponse:
    logger.error("Unusable service response for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": f"Unusable service response: {exc}"})


@app.get("/api/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": settings.api_version}
