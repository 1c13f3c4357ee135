"""Reconciliation of a proposed ordering against the authoritative records.

The service proposes an order as indices into the flat objective list it
was shown. Its answer is optional: whatever it returns, `reconcile` yields
exactly one row per authoritative position, numbered 1..N.

Strategy selection is structural, first match wins:

- `FineGrained`: N integer indices, one per objective. Out-of-range or
  repeated indices become placeholder rows individually.
- `Coarse`: G distinct integer indices in [0, G), one per material. Whole
  materials are emitted in that order, objectives in original sub-order.
- `Identity`: anything else. The proposal is ignored and the authoritative
  order is kept. Logged, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union

from planner.models.artifacts import SequencedRow
from planner.models.constants import PLACEHOLDER_CODE, PLACEHOLDER_TOPIC
from planner.models.curriculum import FlatObjectiveRecord

logger = logging.getLogger(__name__)


class StrategyKind(str, Enum):
    FINE_GRAINED = "fine_grained"
    COARSE = "coarse"
    IDENTITY = "identity"


@dataclass(frozen=True)
class FineGrained:
    """Reorder individual objectives."""

    order: tuple[int, ...]
    kind: StrategyKind = StrategyKind.FINE_GRAINED


@dataclass(frozen=True)
class Coarse:
    """Reorder whole materials."""

    group_order: tuple[int, ...]
    kind: StrategyKind = StrategyKind.COARSE


@dataclass(frozen=True)
class Identity:
    """Keep the authoritative order; `reason` explains why the proposal was ignored."""

    reason: str
    kind: StrategyKind = StrategyKind.IDENTITY


Strategy = Union[FineGrained, Coarse, Identity]


@dataclass
class ReconciliationResult:
    """Rows produced by one reconciliation, with the strategy that produced them."""

    rows: list[SequencedRow]
    strategy: Strategy
    warnings: list[str] = field(default_factory=list)

    @property
    def kind(self) -> StrategyKind:
        return self.strategy.kind


# -----------------------------------------------------------------------------
# Proposal coercion
# -----------------------------------------------------------------------------


def _as_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def coerce_indices(proposal: Any) -> list[int] | None:
    """
    Read a proposal as a flat list of integers.

    Accepts a list of integers or a list of `{"index": int, ...}` objects.
    Returns None if any element is neither.
    """
    if not isinstance(proposal, list):
        return None
    indices: list[int] = []
    for item in proposal:
        if isinstance(item, dict):
            item = item.get("index")
        index = _as_index(item)
        if index is None:
            return None
        indices.append(index)
    return indices


# -----------------------------------------------------------------------------
# Strategy selection
# -----------------------------------------------------------------------------


def select_strategy(proposal: Any, record_count: int, group_count: int) -> Strategy:
    """Pick the reconciliation strategy whose shape matches the proposal."""
    indices = coerce_indices(proposal)
    if indices is None:
        return Identity(reason=f"proposal is not a list of indices ({type(proposal).__name__})")

    if len(indices) == record_count:
        return FineGrained(order=tuple(indices))

    if len(indices) == group_count:
        in_range = all(0 <= i < group_count for i in indices)
        if in_range and len(set(indices)) == group_count:
            return Coarse(group_order=tuple(indices))
        return Identity(reason=f"material indices {indices} are not a permutation of 0..{group_count - 1}")

    return Identity(
        reason=(
            f"proposal has {len(indices)} entries, expected {record_count} "
            f"objectives or {group_count} materials"
        )
    )


# -----------------------------------------------------------------------------
# Strategy application
# -----------------------------------------------------------------------------


def _row(record: FlatObjectiveRecord, sequence: int) -> SequencedRow:
    return SequencedRow(
        topic=record.material,
        objective=record.objective,
        code=record.code,
        sequence=sequence,
        semester=record.semester,
    )


def _placeholder(sequence: int, index: int, reason: str) -> SequencedRow:
    return SequencedRow(
        topic=PLACEHOLDER_TOPIC,
        objective=f"[index {index} {reason}]",
        code=PLACEHOLDER_CODE,
        sequence=sequence,
        is_placeholder=True,
    )


def _apply_fine_grained(
    strategy: FineGrained,
    records: list[FlatObjectiveRecord],
    group_count: int,
) -> tuple[list[SequencedRow], list[str]]:
    rows: list[SequencedRow] = []
    warnings: list[str] = []
    seen: set[int] = set()
    for position, index in enumerate(strategy.order, start=1):
        if not 0 <= index < len(records):
            warnings.append(f"Position {position}: index {index} out of range")
            rows.append(_placeholder(position, index, "out of range"))
        elif index in seen:
            warnings.append(f"Position {position}: index {index} repeated")
            rows.append(_placeholder(position, index, "repeated"))
        else:
            seen.add(index)
            rows.append(_row(records[index], position))
    return rows, warnings


def _apply_coarse(
    strategy: Coarse,
    records: list[FlatObjectiveRecord],
    group_count: int,
) -> tuple[list[SequencedRow], list[str]]:
    by_group: dict[int, list[FlatObjectiveRecord]] = {i: [] for i in range(group_count)}
    for record in records:
        by_group[record.material_index].append(record)

    rows: list[SequencedRow] = []
    warnings: list[str] = []
    for group_index in strategy.group_order:
        members = by_group[group_index]
        if not members:
            warnings.append(f"Material {group_index} has no objectives")
        for record in members:
            rows.append(_row(record, len(rows) + 1))
    return rows, warnings


def _apply_identity(
    strategy: Identity,
    records: list[FlatObjectiveRecord],
    group_count: int,
) -> tuple[list[SequencedRow], list[str]]:
    rows = [_row(record, position) for position, record in enumerate(records, start=1)]
    return rows, [f"Proposal ignored: {strategy.reason}"]


_APPLIERS: dict[StrategyKind, Callable[..., tuple[list[SequencedRow], list[str]]]] = {
    StrategyKind.FINE_GRAINED: _apply_fine_grained,
    StrategyKind.COARSE: _apply_coarse,
    StrategyKind.IDENTITY: _apply_identity,
}


def reconcile(
    records: list[FlatObjectiveRecord],
    proposal: Any,
    group_count: int | None = None,
) -> ReconciliationResult:
    """
    Map a proposed ordering onto the authoritative flat records.

    Args:
        records: Output of `flatten_tree`, the ground truth.
        proposal: Parsed service answer, or None when parsing failed.
        group_count: Number of materials in the tree. Defaults to the number
            of distinct materials referenced by `records`; pass it explicitly
            when the tree has materials without objectives.

    Returns:
        ReconciliationResult whose rows number exactly `len(records)`.
    """
    if group_count is None:
        group_count = max((r.material_index for r in records), default=-1) + 1

    strategy = select_strategy(proposal, len(records), group_count)
    rows, warnings = _APPLIERS[strategy.kind](strategy, records, group_count)

    if isinstance(strategy, Identity) and records:
        logger.warning(
            "Falling back to original order for %d objectives (%d materials): %s",
            len(records),
            group_count,
            strategy.reason,
        )
    for warning in warnings:
        logger.debug(warning)

    logger.info("Reconciled %d rows using %s strategy", len(rows), strategy.kind.value)
    return ReconciliationResult(rows=rows, strategy=strategy, warnings=warnings)
