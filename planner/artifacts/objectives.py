"""Objective-tree (TP) generation from learning outcomes.

Flow:
1. Send CP elements, grade and notes to the service
2. Sanitize and parse the response
3. Validate each material group (Pydantic), skipping malformed ones
4. Fail with MalformedResponse only if no group survives
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from planner.artifacts.actions import ACTION_OBJECTIVES, dispatch_action
from planner.errors import ArtifactGenerationError, MalformedResponse
from planner.gemini_client import TextGenerator
from planner.models.constants import SEMESTER_ODD
from planner.models.curriculum import CPElement, CurriculumTree, MaterialGroup, normalize_semester
from planner.parsing import parse_response

logger = logging.getLogger(__name__)


@dataclass
class ObjectivesResult:
    """Generated curriculum tree plus any groups that had to be dropped or fixed."""

    tree: CurriculumTree
    raw_response: str = ""
    warnings: list[str] = field(default_factory=list)


def _group_candidates(parsed: Any) -> list[Any]:
    if isinstance(parsed, dict):
        if isinstance(parsed.get("tpGroups"), list):
            return parsed["tpGroups"]
        return [parsed]
    if isinstance(parsed, list):
        return parsed
    return []


def _clean_group(candidate: Any, position: int, warnings: list[str]) -> MaterialGroup | None:
    if not isinstance(candidate, dict):
        warnings.append(f"Group {position}: expected object, got {type(candidate).__name__}")
        return None

    data = dict(candidate)
    semester = normalize_semester(data.get("semester"))
    if semester is None:
        warnings.append(f"Group {position}: unknown semester {data.get('semester')!r}, using {SEMESTER_ODD}")
        semester = SEMESTER_ODD
    data["semester"] = semester

    sub_groups = []
    for sub in data.get("subMateriGroups") or []:
        if not isinstance(sub, dict):
            continue
        objectives = [tp.strip() for tp in sub.get("tps") or [] if isinstance(tp, str) and tp.strip()]
        sub_groups.append({"subMateri": sub.get("subMateri", ""), "tps": objectives})
    data["subMateriGroups"] = sub_groups

    try:
        return MaterialGroup.model_validate(data)
    except ValidationError as e:
        warnings.append(f"Group {position}: {e.error_count()} validation errors, skipped")
        logger.debug("Group %d rejected: %s", position, e)
        return None


def build_tree_from_response(raw_response: str) -> tuple[CurriculumTree, list[str]]:
    """
    Parse a TP generation response into a curriculum tree.

    Raises:
        MalformedResponse: If the response is unparsable or holds no valid group.
    """
    parsed = parse_response(raw_response)
    warnings: list[str] = []
    groups: list[MaterialGroup] = []
    for position, candidate in enumerate(_group_candidates(parsed)):
        group = _clean_group(candidate, position, warnings)
        if group is not None:
            groups.append(group)
    if not groups:
        raise MalformedResponse("Response contains no valid material group", raw_text=raw_response)
    return CurriculumTree(groups=groups), warnings


def generate_objectives(
    service: TextGenerator,
    cp_elements: list[CPElement],
    grade: str,
    additional_notes: str = "",
) -> ObjectivesResult:
    """
    Generate a curriculum tree from CP elements.

    Raises:
        ArtifactGenerationError: If no CP element is given or the service call fails.
        MalformedResponse: If the response holds no usable tree.
    """
    elements = [e for e in cp_elements if e.cp.strip()]
    if not elements:
        raise ArtifactGenerationError("At least one CP element with text is required")

    payload = {
        "cpElements": [e.model_dump() for e in elements],
        "grade": grade,
        "additionalNotes": additional_notes,
    }
    try:
        raw_response = dispatch_action(service, ACTION_OBJECTIVES, payload)
    except Exception as e:
        error_msg = f"Objective generation failed: {e}"
        logger.error(error_msg)
        raise ArtifactGenerationError(error_msg) from e

    tree, warnings = build_tree_from_response(raw_response)
    for warning in warnings:
        logger.warning(warning)
    logger.info("Generated %d material groups", len(tree.groups))
    return ObjectivesResult(tree=tree, raw_response=raw_response, warnings=warnings)
