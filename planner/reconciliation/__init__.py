"""Flattening of the curriculum tree and reconciliation of proposed orderings."""

from planner.reconciliation.flattener import count_objectives, flatten_tree, material_count
from planner.reconciliation.strategies import (
    Coarse,
    FineGrained,
    Identity,
    ReconciliationResult,
    StrategyKind,
    reconcile,
    select_strategy,
)

__all__ = [
    "flatten_tree",
    "count_objectives",
    "material_count",
    "reconcile",
    "select_strategy",
    "ReconciliationResult",
    "StrategyKind",
    "FineGrained",
    "Coarse",
    "Identity",
]
