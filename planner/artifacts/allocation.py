"""Time allocation (PROTA) generation and per-row validation.

The service is told the yearly budget (weekly hours x 32 effective weeks)
and asked for one `"<n> JP"` value per flow row. Only the per-row format is
checked here: a value that is missing, duplicated or malformed is replaced
with a conservative default. Whether the values add up to the budget is
left to the service; the total is reported, never corrected.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from planner.artifacts.actions import ACTION_ALLOCATION, dispatch_action
from planner.errors import ArtifactGenerationError, MalformedResponse
from planner.gemini_client import TextGenerator
from planner.models.artifacts import AllocationRow, SequencedRow
from planner.models.constants import (
    DEFAULT_TIME_BUDGET,
    EFFECTIVE_WEEKS_PER_YEAR,
    TIME_BUDGET_PATTERN,
)
from planner.parsing import parse_response

logger = logging.getLogger(__name__)

_BUDGET_RE = re.compile(TIME_BUDGET_PATTERN)

# Keys under which the service may return the value of an entry
VALUE_KEYS = ("value", "alokasiWaktu", "timeBudget")


@dataclass
class AllocationValidation:
    """Accepted value per row, and which rows were substituted."""

    values: list[str]
    substituted: list[int] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class AllocationResult:
    rows: list[AllocationRow]
    budget: int
    substituted: list[int] = field(default_factory=list)
    raw_response: str = ""
    warnings: list[str] = field(default_factory=list)

    @property
    def allocated_total(self) -> int:
        return sum(row.hours for row in self.rows)


def yearly_budget(weekly_hours: int) -> int:
    """Total hours the service is asked to distribute."""
    return weekly_hours * EFFECTIVE_WEEKS_PER_YEAR


def is_valid_budget(value: Any) -> bool:
    return isinstance(value, str) and _BUDGET_RE.match(value.strip()) is not None


def _entry_index(entry: dict[str, Any]) -> int | None:
    index = entry.get("index")
    if isinstance(index, bool):
        return None
    if isinstance(index, float) and index.is_integer():
        return int(index)
    return index if isinstance(index, int) else None


def _entry_value(entry: dict[str, Any]) -> Any:
    for key in VALUE_KEYS:
        if key in entry:
            return entry[key]
    return None


def validate_allocations(
    entries: Any,
    row_count: int,
    default_value: str = DEFAULT_TIME_BUDGET,
) -> AllocationValidation:
    """
    Align proposed `{index, value}` entries with `row_count` rows.

    Args:
        entries: Parsed service answer, expected to be a list of objects.
        row_count: Number of rows the allocation must cover.
        default_value: Value used for rows without exactly one valid entry.

    Returns:
        AllocationValidation with one value per row.
    """
    warnings: list[str] = []
    if not isinstance(entries, list):
        warnings.append(f"Expected a list of entries, got {type(entries).__name__}")
        entries = []

    proposed: dict[int, list[Any]] = {}
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            warnings.append(f"Entry {position}: expected object, ignored")
            continue
        index = _entry_index(entry)
        if index is None or not 0 <= index < row_count:
            warnings.append(f"Entry {position}: invalid index {entry.get('index')!r}, ignored")
            continue
        proposed.setdefault(index, []).append(_entry_value(entry))

    values: list[str] = []
    substituted: list[int] = []
    for row in range(row_count):
        candidates = proposed.get(row, [])
        if len(candidates) == 1 and is_valid_budget(candidates[0]):
            values.append(candidates[0].strip())
            continue

        if not candidates:
            reason = "missing"
        elif len(candidates) > 1:
            reason = f"duplicated ({len(candidates)} entries)"
        else:
            reason = f"malformed value {candidates[0]!r}"
        substituted.append(row)
        values.append(default_value)
        warnings.append(f"Row {row}: {reason}, using {default_value}")
        logger.warning("Allocation row %d %s, substituted %s", row, reason, default_value)

    return AllocationValidation(values=values, substituted=substituted, warnings=warnings)


def build_allocation_rows(flow_rows: list[SequencedRow], values: list[str]) -> list[AllocationRow]:
    return [
        AllocationRow(
            order=row.sequence,
            topic=row.topic,
            code=row.code,
            objective=row.objective,
            time_budget=value,
            semester=row.semester,
        )
        for row, value in zip(flow_rows, values)
    ]


def generate_allocation(
    service: TextGenerator,
    flow_rows: list[SequencedRow],
    weekly_hours: int,
    subject: str = "",
) -> AllocationResult:
    """
    Generate one time budget per flow row.

    Raises:
        ArtifactGenerationError: If there are no rows, `weekly_hours` is not
            positive, or the service call fails.
    """
    if not flow_rows:
        raise ArtifactGenerationError("Flow has no rows to allocate time to")
    if weekly_hours < 1:
        raise ArtifactGenerationError(f"Weekly hours must be positive, got {weekly_hours}")

    budget = yearly_budget(weekly_hours)
    payload = {
        "subject": subject,
        "jamPertemuan": weekly_hours,
        "items": [
            {"index": i, "topikMateri": row.topic, "tujuanPembelajaran": row.objective}
            for i, row in enumerate(flow_rows)
        ],
    }
    try:
        raw_response = dispatch_action(service, ACTION_ALLOCATION, payload)
    except Exception as e:
        error_msg = f"Allocation generation failed: {e}"
        logger.error(error_msg)
        raise ArtifactGenerationError(error_msg) from e

    warnings: list[str] = []
    try:
        entries = parse_response(raw_response)
    except MalformedResponse as e:
        warnings.append(f"Unparsable allocation, every row defaulted: {e}")
        entries = []

    validation = validate_allocations(entries, len(flow_rows))
    warnings.extend(validation.warnings)
    result = AllocationResult(
        rows=build_allocation_rows(flow_rows, validation.values),
        budget=budget,
        substituted=validation.substituted,
        raw_response=raw_response,
        warnings=warnings,
    )

    # Reported only: the budget sum is guidance for the service, not enforced
    if result.allocated_total != budget:
        logger.info(
            "Allocated %d of %d budgeted hours (difference left as generated)",
            result.allocated_total,
            budget,
        )
    return result
