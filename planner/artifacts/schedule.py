"""Semester schedule (PROSEM) generation.

Each allocation row of the semester is reduced to `{id, total_jp}` and the
service spreads those hours over the weeks of the semester months. The
answer is normalised to exactly five slots per month (zero becomes an empty
slot) and every row is corrected so its slots add up to its allocation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from planner.artifacts.actions import ACTION_SCHEDULE, dispatch_action
from planner.errors import ArtifactGenerationError, MalformedResponse
from planner.gemini_client import TextGenerator
from planner.models.artifacts import AllocationRow, ScheduleHeader, ScheduleRow
from planner.models.constants import SEMESTER_MONTHS, WEEKS_PER_MONTH
from planner.models.curriculum import normalize_semester
from planner.parsing import parse_response

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r"\D")

Distribution = dict[str, list[str | None]]


@dataclass
class ScheduleResult:
    semester: str
    headers: list[ScheduleHeader]
    rows: list[ScheduleRow] = field(default_factory=list)
    corrected: list[int] = field(default_factory=list)
    raw_response: str = ""
    warnings: list[str] = field(default_factory=list)


def semester_headers(semester: str) -> list[ScheduleHeader]:
    """One header per month of the semester, five weeks each."""
    label = normalize_semester(semester)
    if label is None:
        raise ArtifactGenerationError(f"Unknown semester: {semester!r}")
    return [ScheduleHeader(month=month, weeks=WEEKS_PER_MONTH) for month in SEMESTER_MONTHS[label]]


def budget_hours(time_budget: str) -> int:
    """Hours in a budget label such as "6 JP"; 0 if it holds no digits."""
    digits = _DIGITS_RE.sub("", time_budget or "")
    return int(digits) if digits else 0


def empty_distribution(months: list[str]) -> Distribution:
    return {month: [None] * WEEKS_PER_MONTH for month in months}


def _slot_value(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        return None
    return str(value)


def normalize_distribution(raw_months: Any, months: list[str]) -> Distribution:
    """
    Coerce a proposed `{month: [hours...]}` mapping to five slots per month.

    Zero, null and non-numeric values become empty slots; extra weeks are cut
    and missing weeks or months are left empty.
    """
    distribution = empty_distribution(months)
    if not isinstance(raw_months, dict):
        return distribution
    for month in months:
        weeks = raw_months.get(month)
        if not isinstance(weeks, list):
            continue
        slots = [_slot_value(v) for v in weeks[:WEEKS_PER_MONTH]]
        distribution[month] = slots + [None] * (WEEKS_PER_MONTH - len(slots))
    return distribution


def distribution_total(distribution: Distribution) -> int:
    return sum(int(v) for weeks in distribution.values() for v in weeks if v)


def correct_distribution(distribution: Distribution, months: list[str], target: int) -> bool:
    """
    Adjust `distribution` in place so its slots add up to `target` hours.

    A surplus is added to the very first slot of the semester. A deficit is
    taken from the filled slots in calendar order, emptying each one before
    moving on to the next. Rows with a zero target are left as generated.

    Returns:
        True if the distribution was changed.
    """
    if target <= 0:
        return False
    diff = target - distribution_total(distribution)
    if diff == 0:
        return False

    if diff > 0:
        first = distribution[months[0]]
        first[0] = str(int(first[0] or 0) + diff)
        return True

    excess = -diff
    for month in months:
        weeks = distribution[month]
        for i, value in enumerate(weeks):
            if not value or excess == 0:
                continue
            taken = min(int(value), excess)
            remaining = int(value) - taken
            weeks[i] = str(remaining) if remaining else None
            excess -= taken
    return True


def generate_schedule(
    service: TextGenerator,
    allocation_rows: list[AllocationRow],
    semester: str,
) -> ScheduleResult:
    """
    Generate the weekly schedule for the allocation rows of one semester.

    Raises:
        ArtifactGenerationError: If the semester is unknown, has no allocation
            rows, or the service call fails.
    """
    headers = semester_headers(semester)
    months = [header.month for header in headers]
    wanted = semester.strip().lower()
    units = [row for row in allocation_rows if row.semester.strip().lower() == wanted]
    if not units:
        raise ArtifactGenerationError(f"No allocation rows for semester {semester}")

    payload = {
        "semester": semester,
        "months": months,
        "weeksPerMonth": WEEKS_PER_MONTH,
        "items": [{"id": i + 1, "total_jp": budget_hours(row.time_budget)} for i, row in enumerate(units)],
    }
    try:
        raw_response = dispatch_action(service, ACTION_SCHEDULE, payload)
    except Exception as e:
        error_msg = f"Schedule generation failed: {e}"
        logger.error(error_msg)
        raise ArtifactGenerationError(error_msg) from e

    warnings: list[str] = []
    try:
        parsed = parse_response(raw_response)
    except MalformedResponse as e:
        warnings.append(f"Unparsable schedule, distributing from empty rows: {e}")
        parsed = []
    if isinstance(parsed, dict):
        parsed = [parsed]
    if not isinstance(parsed, list):
        parsed = []

    by_id: dict[int, dict[str, Any]] = {}
    for item in parsed:
        if not isinstance(item, dict):
            continue
        try:
            item_id = int(item.get("id"))
        except (TypeError, ValueError):
            continue
        by_id.setdefault(item_id, item)

    rows: list[ScheduleRow] = []
    corrected: list[int] = []
    for i, unit in enumerate(units):
        item = by_id.get(i + 1)
        if item is None:
            warnings.append(f"Row {i}: no distribution returned")
            distribution = empty_distribution(months)
            note = ""
        else:
            distribution = normalize_distribution(item.get("bulan"), months)
            note = str(item.get("keterangan") or "")

        if correct_distribution(distribution, months, budget_hours(unit.time_budget)):
            corrected.append(i)
            logger.debug("Schedule row %d corrected to %s", i, unit.time_budget)

        rows.append(
            ScheduleRow(
                order=unit.order,
                objective=unit.objective,
                time_budget=unit.time_budget,
                weeks_by_month=distribution,
                note=note,
            )
        )

    for warning in warnings:
        logger.warning(warning)
    logger.info("Scheduled %d rows for %s (%d corrected)", len(rows), semester, len(corrected))
    return ScheduleResult(
        semester=normalize_semester(semester) or semester,
        headers=headers,
        rows=rows,
        corrected=corrected,
        raw_response=raw_response,
        warnings=warnings,
    )
