"""Models package for the curriculum tree, derived artifacts and constants."""

from planner.models.artifacts import (
    AllocationRow,
    CriteriaByLevel,
    CriterionRow,
    ScheduleHeader,
    ScheduleRow,
    SequencedRow,
)
from planner.models.curriculum import (
    CPElement,
    CurriculumDocument,
    CurriculumTree,
    FlatObjectiveRecord,
    MaterialGroup,
    SubMaterialGroup,
    normalize_semester,
)

__all__ = [
    "CPElement",
    "CurriculumDocument",
    "CurriculumTree",
    "MaterialGroup",
    "SubMaterialGroup",
    "FlatObjectiveRecord",
    "normalize_semester",
    "SequencedRow",
    "AllocationRow",
    "CriteriaByLevel",
    "CriterionRow",
    "ScheduleHeader",
    "ScheduleRow",
]
