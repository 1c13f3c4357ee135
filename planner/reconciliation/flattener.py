"""Hierarchy flattener.

Turns the nested curriculum tree into the ordered, uniquely coded flat
sequence that serves as ground truth for reconciliation.
"""

from __future__ import annotations

from planner.models.curriculum import CurriculumTree, FlatObjectiveRecord


def flatten_tree(tree: CurriculumTree) -> list[FlatObjectiveRecord]:
    """
    Flatten a curriculum tree into one record per leaf objective.

    Materials, sub-groups and objectives are visited in declaration order.
    Codes are `<material>.<objective>`: the material number counts across
    the whole tree (not per semester) and the objective number restarts at
    each material and continues across its sub-groups.

    Args:
        tree: The curriculum tree to flatten.

    Returns:
        Flat records in traversal order. An empty tree yields an empty list.
    """
    records: list[FlatObjectiveRecord] = []
    for material_index, group in enumerate(tree.groups):
        counter = 1
        for sub_group in group.sub_groups:
            for objective in sub_group.objectives:
                records.append(
                    FlatObjectiveRecord(
                        semester=group.semester,
                        material=group.material,
                        objective=objective,
                        code=f"{material_index + 1}.{counter}",
                        material_index=material_index,
                    )
                )
                counter += 1
    return records


def count_objectives(tree: CurriculumTree) -> int:
    """Total number of objectives across all sub-groups."""
    return sum(len(sub.objectives) for group in tree.groups for sub in group.sub_groups)


def material_count(tree: CurriculumTree) -> int:
    return len(tree.groups)
