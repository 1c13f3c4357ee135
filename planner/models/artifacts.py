"""Pydantic models for the derived artifacts.

Each row model serialises with the aliases used by the stored artifact
documents (`model_dump(by_alias=True)`).
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from planner.models.constants import (
    DEFAULT_TARGET_LEVEL,
    MASTERY_LEVELS,
)

_LEADING_NUMBER_RE = re.compile(r"^\s*(\d+)")


class _Row(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# -----------------------------------------------------------------------------
# Flow (ATP)
# -----------------------------------------------------------------------------


class SequencedRow(_Row):
    """One row of the learning-objective flow."""

    topic: str = Field(..., alias="topikMateri")
    objective: str = Field(..., alias="tp")
    code: str = Field(..., alias="kodeTp")
    sequence: int = Field(..., ge=1, alias="atpSequence")
    semester: str = ""
    is_placeholder: bool = Field(default=False, alias="isPlaceholder")


# -----------------------------------------------------------------------------
# Time allocation (PROTA)
# -----------------------------------------------------------------------------


class AllocationRow(_Row):
    """Time budget assigned to one flow row."""

    order: int = Field(..., alias="no")
    topic: str = Field(..., alias="topikMateri")
    code: str = Field(..., alias="alurTujuanPembelajaran")
    objective: str = Field(..., alias="tujuanPembelajaran")
    # Stored rows may be hand-edited ("120 Menit"); the "N JP" form is
    # enforced on generated values by validate_allocations.
    time_budget: str = Field(..., alias="alokasiWaktu")
    semester: str = ""

    @property
    def hours(self) -> int:
        match = _LEADING_NUMBER_RE.match(self.time_budget)
        return int(match.group(1)) if match else 0


# -----------------------------------------------------------------------------
# Mastery criteria (KKTP)
# -----------------------------------------------------------------------------


class CriteriaByLevel(_Row):
    """Criterion text for each of the four mastery levels."""

    sangat_mahir: str = Field(..., alias="sangatMahir")
    mahir: str = Field(...)
    cukup_mahir: str = Field(..., alias="cukupMahir")
    perlu_bimbingan: str = Field(..., alias="perluBimbingan")


class CriterionRow(_Row):
    """Mastery criteria and minimum target level for one objective."""

    order: int = Field(..., alias="no")
    code: str = Field(default="", alias="kodeTp")
    topic: str = Field(..., alias="materiPokok")
    objective: str = Field(..., alias="tp")
    criteria: CriteriaByLevel = Field(..., alias="kriteria")
    target_level: str = Field(default=DEFAULT_TARGET_LEVEL, alias="targetKktp")
    is_default: bool = Field(default=False, alias="isDefault")

    @field_validator("target_level")
    @classmethod
    def validate_target_level(cls, v: str) -> str:
        if v not in MASTERY_LEVELS:
            msg = f"targetKktp must be one of {MASTERY_LEVELS}, got '{v}'"
            raise ValueError(msg)
        return v


# -----------------------------------------------------------------------------
# Semester schedule (PROSEM)
# -----------------------------------------------------------------------------


class ScheduleHeader(_Row):
    month: str
    weeks: int


class ScheduleRow(_Row):
    """Weekly distribution of one allocation row over a semester."""

    order: int = Field(..., alias="no")
    objective: str = Field(..., alias="tujuanPembelajaran")
    time_budget: str = Field(..., alias="alokasiWaktu")
    weeks_by_month: dict[str, list[str | None]] = Field(default_factory=dict, alias="bulan")
    note: str = Field(default="", alias="keterangan")

    def scheduled_hours(self) -> int:
        return sum(int(v) for weeks in self.weeks_by_month.values() for v in weeks if v)
