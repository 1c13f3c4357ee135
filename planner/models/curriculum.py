"""Pydantic models for the curriculum (TP) document.

Field aliases follow the stored document format (`tpGroups`, `materi`,
`subMateriGroups`, `subMateri`, `tps`) so existing documents load
unchanged. Python code uses the snake_case names.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from planner.models.constants import SEMESTER_ODD, VALID_SEMESTERS


def normalize_semester(value: object, default: str | None = None) -> str | None:
    """Map a semester label onto its canonical spelling, ignoring case.

    Returns `default` when the value is not a known semester label.
    """
    if isinstance(value, str):
        cleaned = value.strip().lower()
        for label in VALID_SEMESTERS:
            if cleaned == label.lower():
                return label
    return default


# -----------------------------------------------------------------------------
# Tree components
# -----------------------------------------------------------------------------


class CPElement(BaseModel):
    """One curriculum element with its learning outcome (CP) text."""

    element: str = ""
    cp: str = ""


class SubMaterialGroup(BaseModel):
    """A sub-topic holding an ordered list of objective statements."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default="", alias="subMateri")
    objectives: list[str] = Field(default_factory=list, alias="tps")


class MaterialGroup(BaseModel):
    """A main topic (materi pokok), tagged with the semester it is taught in."""

    model_config = ConfigDict(populate_by_name=True)

    semester: str = Field(default=SEMESTER_ODD)
    material: str = Field(..., alias="materi")
    sub_groups: list[SubMaterialGroup] = Field(default_factory=list, alias="subMateriGroups")

    @field_validator("semester")
    @classmethod
    def validate_semester(cls, v: str) -> str:
        label = normalize_semester(v)
        if label is None:
            msg = f"semester must be one of {VALID_SEMESTERS}, got '{v}'"
            raise ValueError(msg)
        return label


class CurriculumTree(BaseModel):
    """Ordered sequence of material groups. Order is significant."""

    model_config = ConfigDict(populate_by_name=True)

    groups: list[MaterialGroup] = Field(default_factory=list, alias="tpGroups")

    @classmethod
    def from_groups(cls, groups: list[dict]) -> CurriculumTree:
        """Build a tree from a bare list of group dicts."""
        return cls.model_validate({"tpGroups": groups})


class CurriculumDocument(CurriculumTree):
    """The persisted TP document: the tree plus its authoring metadata."""

    subject: str
    grade: str = "7"
    cp_elements: list[CPElement] = Field(default_factory=list, alias="cpElements")
    creator_name: str = Field(default="", alias="creatorName")
    creator_email: str = Field(default="", alias="creatorEmail")
    cp_source_version: str = Field(default="", alias="cpSourceVersion")
    additional_notes: str = Field(default="", alias="additionalNotes")


# -----------------------------------------------------------------------------
# Flattened view
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FlatObjectiveRecord:
    """One leaf objective with its position-derived hierarchical code."""

    semester: str
    material: str
    objective: str
    code: str
    material_index: int
