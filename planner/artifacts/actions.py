"""Action dispatch for the generative service boundary.

A generation request is an action tag plus a JSON-serialisable payload. This
module turns it into a prompt, calls the service once and returns the raw
response text. The text is untrusted; parsing and reconciliation happen in
the artifact modules.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from planner.artifacts.prompts import (
    build_allocation_prompt,
    build_criteria_prompt,
    build_objectives_prompt,
    build_schedule_prompt,
    build_sequence_prompt,
)
from planner.errors import UnknownActionError
from planner.gemini_client import TextGenerator
from planner.models.constants import EFFECTIVE_WEEKS_PER_YEAR, WEEKS_PER_MONTH

logger = logging.getLogger(__name__)

ACTION_OBJECTIVES = "generateTPs"
ACTION_FLOW = "generateATP"
ACTION_ALLOCATION = "generatePROTA"
ACTION_CRITERIA = "generateKKTP"
ACTION_SCHEDULE = "generatePROSEM"


def _objectives(payload: dict[str, Any]) -> str:
    return build_objectives_prompt(
        cp_elements=payload.get("cpElements", []),
        grade=str(payload.get("grade", "")),
        additional_notes=payload.get("additionalNotes", ""),
    )


def _flow(payload: dict[str, Any]) -> str:
    return build_sequence_prompt(
        subject=payload.get("subject", ""),
        grade=str(payload.get("grade", "")),
        items=payload.get("items", []),
    )


def _allocation(payload: dict[str, Any]) -> str:
    weekly_hours = int(payload["jamPertemuan"])
    return build_allocation_prompt(
        subject=payload.get("subject", ""),
        weekly_hours=weekly_hours,
        total_budget=weekly_hours * EFFECTIVE_WEEKS_PER_YEAR,
        items=payload.get("items", []),
    )


def _criteria(payload: dict[str, Any]) -> str:
    return build_criteria_prompt(
        subject=payload.get("subject", ""),
        grade=str(payload.get("grade", "")),
        semester=payload.get("semester", ""),
        items=payload.get("items", []),
    )


def _schedule(payload: dict[str, Any]) -> str:
    return build_schedule_prompt(
        semester=payload.get("semester", ""),
        months=list(payload.get("months", [])),
        weeks_per_month=int(payload.get("weeksPerMonth", WEEKS_PER_MONTH)),
        items=payload.get("items", []),
    )


PROMPT_BUILDERS: dict[str, Callable[[dict[str, Any]], str]] = {
    ACTION_OBJECTIVES: _objectives,
    ACTION_FLOW: _flow,
    ACTION_ALLOCATION: _allocation,
    ACTION_CRITERIA: _criteria,
    ACTION_SCHEDULE: _schedule,
}


def build_prompt(action: str, payload: dict[str, Any]) -> str:
    """Build the prompt for `action`, raising UnknownActionError for unknown tags."""
    builder = PROMPT_BUILDERS.get(action)
    if builder is None:
        raise UnknownActionError(f"Unknown action: {action}")
    return builder(payload)


def dispatch_action(service: TextGenerator, action: str, payload: dict[str, Any]) -> str:
    """
    Send one generation request and return the raw response text.

    Args:
        service: The generative text service.
        action: One of the `ACTION_*` tags.
        payload: Action-specific JSON-serialisable data.

    Raises:
        UnknownActionError: If `action` is not supported.
        KeyError: If a required payload field is missing.
    """
    prompt = build_prompt(action, payload)
    logger.info("Dispatching %s (%d items)", action, len(payload.get("items", payload.get("cpElements", []))))
    return service.generate_text(
        prompt,
        response_mime_type="application/json",
        temperature=0.0,
    )
