"""Generation flows for the curriculum tree and each derived artifact."""

from planner.artifacts.actions import (
    ACTION_ALLOCATION,
    ACTION_CRITERIA,
    ACTION_FLOW,
    ACTION_OBJECTIVES,
    ACTION_SCHEDULE,
    build_prompt,
    dispatch_action,
)
from planner.artifacts.allocation import (
    AllocationResult,
    AllocationValidation,
    generate_allocation,
    validate_allocations,
)
from planner.artifacts.criteria import CriteriaResult, generate_criteria
from planner.artifacts.flow import FlowResult, generate_flow, resequence
from planner.artifacts.objectives import ObjectivesResult, generate_objectives
from planner.artifacts.schedule import ScheduleResult, generate_schedule

__all__ = [
    "ACTION_OBJECTIVES",
    "ACTION_FLOW",
    "ACTION_ALLOCATION",
    "ACTION_CRITERIA",
    "ACTION_SCHEDULE",
    "build_prompt",
    "dispatch_action",
    "ObjectivesResult",
    "generate_objectives",
    "FlowResult",
    "generate_flow",
    "resequence",
    "AllocationResult",
    "AllocationValidation",
    "generate_allocation",
    "validate_allocations",
    "CriteriaResult",
    "generate_criteria",
    "ScheduleResult",
    "generate_schedule",
]
