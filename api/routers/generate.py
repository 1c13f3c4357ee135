"""Generate router - raw action proxy to the generative service.

Endpoints:
    POST /api/generate - Run one action and return the untrusted response text
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_service
from api.schemas.api_models import GenerateRequest, GenerateResponse
from planner.artifacts.actions import dispatch_action
from planner.errors import UnknownActionError
from planner.gemini_client import TextGenerator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate", response_model=GenerateResponse)
def generate(
    request: GenerateRequest,
    service: TextGenerator = Depends(get_service),
) -> GenerateResponse:
    """Build the prompt for `action` and return the service's text as-is.

    Unknown actions are rejected with 400 by the app-level error handler.
    """
    try:
        text = dispatch_action(service, request.action, request.payload)
    except UnknownActionError:
        raise
    except KeyError as e:
        raise HTTPException(status_code=422, detail=f"Missing payload field: {e}") from e
    except Exception as e:
        logger.error("Action %s failed: %s", request.action, e)
        raise HTTPException(status_code=502, detail=f"Generation failed: {e}") from e
    return GenerateResponse(text=text)
