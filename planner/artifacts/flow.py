"""Flow (ATP) generation.

The tree is flattened into the authoritative record list, the service is
shown `{index, tp}` pairs and asked for an order, and the answer is
reconciled back onto the records. A bad or unparsable answer only costs the
ordering; the flow itself always has one row per objective.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from planner.artifacts.actions import ACTION_FLOW, dispatch_action
from planner.errors import ArtifactGenerationError, MalformedResponse
from planner.gemini_client import TextGenerator
from planner.models.artifacts import SequencedRow
from planner.models.curriculum import CurriculumTree
from planner.parsing import parse_response
from planner.reconciliation import StrategyKind, flatten_tree, material_count, reconcile

logger = logging.getLogger(__name__)


@dataclass
class FlowResult:
    rows: list[SequencedRow]
    strategy: StrategyKind
    raw_response: str = ""
    warnings: list[str] = field(default_factory=list)


def generate_flow(
    service: TextGenerator,
    tree: CurriculumTree,
    subject: str = "",
    grade: str = "",
) -> FlowResult:
    """
    Generate the sequenced flow for a curriculum tree.

    Args:
        service: The generative text service.
        tree: Authoritative curriculum tree.
        subject: Subject name, used as prompt context.
        grade: Grade, used as prompt context.

    Returns:
        FlowResult with exactly one row per objective in the tree.

    Raises:
        ArtifactGenerationError: If the tree has no objectives or the service
            call itself fails.
    """
    records = flatten_tree(tree)
    if not records:
        raise ArtifactGenerationError("Curriculum has no objectives to sequence")

    payload = {
        "subject": subject,
        "grade": grade,
        "items": [{"index": i, "tp": record.objective} for i, record in enumerate(records)],
    }
    try:
        raw_response = dispatch_action(service, ACTION_FLOW, payload)
    except Exception as e:
        error_msg = f"Flow generation failed: {e}"
        logger.error(error_msg)
        raise ArtifactGenerationError(error_msg) from e

    proposal: Any
    warnings: list[str] = []
    try:
        proposal = parse_response(raw_response)
    except MalformedResponse as e:
        warnings.append(f"Unparsable ordering, keeping original order: {e}")
        proposal = None

    result = reconcile(records, proposal, group_count=material_count(tree))
    warnings.extend(result.warnings)
    return FlowResult(
        rows=result.rows,
        strategy=result.kind,
        raw_response=raw_response,
        warnings=warnings,
    )


def resequence(rows: list[SequencedRow]) -> list[SequencedRow]:
    """Renumber rows 1..N in their current order, e.g. after manual edits."""
    return [row.model_copy(update={"sequence": i}) for i, row in enumerate(rows, start=1)]
