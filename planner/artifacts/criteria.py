"""Mastery criteria (KKTP) generation for one semester.

The flow rows of the requested semester are sent in small chunks through the
batch orchestrator. Identity fields (code, topic, objective) always come from
the flow; the service only contributes the criteria text and target level.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from pydantic import ValidationError

from planner.artifacts.actions import ACTION_CRITERIA, dispatch_action
from planner.batching import BatchAccumulator, ChunkFailure, run_batched
from planner.gemini_client import TextGenerator
from planner.models.artifacts import CriteriaByLevel, CriterionRow, SequencedRow
from planner.models.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CRITERION_TEXT,
    DEFAULT_PACING_SECONDS,
    DEFAULT_TARGET_LEVEL,
    MASTERY_LEVELS,
)

logger = logging.getLogger(__name__)


@dataclass
class CriteriaResult:
    """Criteria rows for one semester plus batch diagnostics."""

    semester: str
    rows: list[CriterionRow] = field(default_factory=list)
    failures: list[ChunkFailure] = field(default_factory=list)
    defaulted_positions: list[int] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures and not self.defaulted_positions


def rows_for_semester(flow_rows: list[SequencedRow], semester: str) -> list[SequencedRow]:
    """Flow rows taught in `semester`, compared case-insensitively."""
    wanted = semester.strip().lower()
    return [row for row in flow_rows if row.semester.strip().lower() == wanted]


def default_criterion(position: int, row: SequencedRow) -> CriterionRow:
    """Labelled placeholder for a row the service produced nothing usable for."""
    text = DEFAULT_CRITERION_TEXT
    return CriterionRow(
        order=position + 1,
        code=row.code,
        topic=row.topic,
        objective=row.objective,
        criteria=CriteriaByLevel(sangat_mahir=text, mahir=text, cukup_mahir=text, perlu_bimbingan=text),
        target_level=DEFAULT_TARGET_LEVEL,
        is_default=True,
    )


def _ordered_items(parsed: list[Any], start: int) -> list[Any]:
    """Order items by their `index` when every index is present and distinct."""
    indices = []
    for item in parsed:
        index = item.get("index") if isinstance(item, dict) else None
        if not isinstance(index, int) or isinstance(index, bool):
            return parsed
        indices.append(index - start)
    if sorted(indices) != list(range(len(parsed))):
        return parsed
    ordered: list[Any] = [None] * len(parsed)
    for offset, item in zip(indices, parsed):
        ordered[offset] = item
    return ordered


def _criterion_from_item(
    item: Any,
    position: int,
    row: SequencedRow,
    warnings: list[str],
) -> CriterionRow:
    if not isinstance(item, dict):
        warnings.append(f"Row {position}: expected object, using default criteria")
        return default_criterion(position, row)

    target = item.get("targetKktp", DEFAULT_TARGET_LEVEL)
    if target not in MASTERY_LEVELS:
        warnings.append(f"Row {position}: invalid target level {target!r}, using {DEFAULT_TARGET_LEVEL}")
        target = DEFAULT_TARGET_LEVEL

    try:
        criteria = CriteriaByLevel.model_validate(item.get("kriteria") or {})
    except ValidationError as e:
        warnings.append(f"Row {position}: incomplete criteria ({e.error_count()} errors), using default")
        return default_criterion(position, row)

    return CriterionRow(
        order=position + 1,
        code=row.code,
        topic=row.topic,
        objective=row.objective,
        criteria=criteria,
        target_level=target,
    )


def _make_aligner(warnings: list[str]) -> Callable[[Any, Sequence[SequencedRow], int], list[CriterionRow]]:
    def align_chunk(parsed: Any, chunk: Sequence[SequencedRow], start: int) -> list[CriterionRow]:
        if isinstance(parsed, dict):
            parsed = [parsed]
        if not isinstance(parsed, list):
            raise ValueError(f"expected a list, got {type(parsed).__name__}")
        if len(parsed) != len(chunk):
            raise ValueError(f"expected {len(chunk)} items, got {len(parsed)}")
        items = _ordered_items(parsed, start)
        return [
            _criterion_from_item(item, start + offset, row, warnings)
            for offset, (item, row) in enumerate(zip(items, chunk))
        ]

    return align_chunk


def generate_criteria(
    service: TextGenerator,
    flow_rows: list[SequencedRow],
    semester: str,
    subject: str = "",
    grade: str = "",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    pacing_seconds: float = DEFAULT_PACING_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> CriteriaResult:
    """
    Generate mastery criteria for every flow row of one semester.

    Args:
        service: The generative text service.
        flow_rows: The sequenced flow (all semesters).
        semester: Semester to generate for ("Ganjil"/"Genap", any case).
        subject: Subject name, used as prompt context.
        grade: Grade, used as prompt context.
        chunk_size: Rows per service request.
        pacing_seconds: Pause between two requests.
        sleep: Sleep function (injectable for tests).

    Returns:
        CriteriaResult with one row per flow row of the semester. An empty
        semester yields an empty result without calling the service.

    Raises:
        ArtifactGenerationError: If every chunk failed.
    """
    units = rows_for_semester(flow_rows, semester)
    if not units:
        logger.warning("No flow rows for semester %s, nothing to generate", semester)
        return CriteriaResult(semester=semester)

    def request_chunk(chunk: Sequence[SequencedRow], start: int) -> str:
        payload = {
            "subject": subject,
            "grade": grade,
            "semester": semester,
            "items": [
                {"index": start + offset, "materiPokok": row.topic, "tp": row.objective}
                for offset, row in enumerate(chunk)
            ],
        }
        return dispatch_action(service, ACTION_CRITERIA, payload)

    warnings: list[str] = []
    accumulator: BatchAccumulator[CriterionRow] = BatchAccumulator(total=len(units))
    batch = run_batched(
        units,
        request_chunk=request_chunk,
        align_chunk=_make_aligner(warnings),
        default_factory=default_criterion,
        accumulator=accumulator,
        chunk_size=chunk_size,
        pacing_seconds=pacing_seconds,
        sleep=sleep,
    )

    for failure in batch.failures:
        warnings.append(f"Chunk {failure.chunk_index + 1} (rows {failure.start}-{failure.stop - 1}): {failure.reason}")
    # Chunk failures and rows replaced inside a usable chunk
    defaulted = [position for position, row in enumerate(batch.items) if row.is_default]
    for warning in warnings:
        logger.warning(warning)
    logger.info(
        "Generated criteria for %d rows (%d defaulted, %d requests)",
        len(batch.items),
        len(defaulted),
        accumulator.requests_made,
    )
    return CriteriaResult(
        semester=semester,
        rows=batch.items,
        failures=batch.failures,
        defaulted_positions=defaulted,
        warnings=warnings,
    )
