"""Prompt builders for each generation action.

Structure of every prompt:
- Role and context first, then the data as a JSON block
- Numbered mandatory instructions
- Explicit output format with an example
- Negative constraints (no prose, no markdown)

The data blocks carry an explicit `index` per item. Reconciliation relies on
those indices, never on the text the model echoes back.
"""

from __future__ import annotations

import json
from typing import Any

from planner.models.constants import EFFECTIVE_WEEKS_PER_YEAR, MASTERY_LEVELS, TIME_UNIT

_JSON_ONLY = (
    "IMPORTANT: Return ONLY valid JSON, with no introduction, closing remarks or markdown."
)


def _json_block(items: Any) -> str:
    return "```json\n" + json.dumps(items, ensure_ascii=False, indent=2) + "\n```"


# -----------------------------------------------------------------------------
# Objectives (TP)
# -----------------------------------------------------------------------------


def build_objectives_prompt(
    cp_elements: list[dict[str, str]],
    grade: str,
    additional_notes: str = "",
) -> str:
    """Prompt that decomposes CP statements into a material/sub-material/TP tree."""
    elements = "\n\n".join(
        f"Element {i}: {item.get('element', '')}\nLearning outcome (CP) {i}: \"{item.get('cp', '')}\""
        for i, item in enumerate(cp_elements, start=1)
    )
    return f"""You are a curriculum designer and pedagogy expert for the Indonesian
Kurikulum Merdeka at Madrasah Tsanawiyah (MTs) level.

<context>
Grade: {grade}
Learning outcomes (CP) and their elements:
{elements}
Teacher notes: "{additional_notes}"
</context>

<instructions>
1. Identify the main topics (materi pokok) in the CP and decide whether each is
   best taught in semester "Ganjil" or "Genap".
2. Break every main topic into specific sub-topics (sub-materi).
3. For EVERY sub-topic write 2, 3 or more learning objectives (TP), ordered from
   basic understanding to application; the last one or two must be HOTS (C4-C6).
4. Write every TP in ABCD form, starting with "Murid dapat ...".
5. Escape any double quote inside a TP with a backslash.
</instructions>

<output_format>
A JSON array. Each element is one main topic:
[{{"semester": "Ganjil", "materi": "...", "subMateriGroups": [{{"subMateri": "...", "tps": ["Murid dapat ..."]}}]}}]
</output_format>

{_JSON_ONLY}
"""


# -----------------------------------------------------------------------------
# Flow (ATP)
# -----------------------------------------------------------------------------


def build_sequence_prompt(subject: str, grade: str, items: list[dict[str, Any]]) -> str:
    """Prompt asking for a teaching order expressed only as input indices."""
    return f"""You are an expert in curriculum sequencing.
Arrange the unordered learning objectives (TP) below into the most logical
teaching flow (ATP).

<context>
Subject: {subject}
Grade: {grade}
Objectives, each with its original `index`:
{_json_block(items)}
</context>

<instructions>
1. Read every objective and identify prerequisites and difficulty, from
   concrete to abstract and from easy to hard.
2. Reorder the objectives into the best teaching sequence.
3. Return ONLY the original `index` numbers in the new order. Do NOT return
   objective text.
4. The output must contain exactly {len(items)} indices: none missing, none repeated.
</instructions>

<output_format>
A JSON array of integers, e.g. [2, 0, 1]
</output_format>

{_JSON_ONLY}
"""


# -----------------------------------------------------------------------------
# Time allocation (PROTA)
# -----------------------------------------------------------------------------


def build_allocation_prompt(
    subject: str,
    weekly_hours: int,
    total_budget: int,
    items: list[dict[str, Any]],
) -> str:
    """Prompt asking for one time budget per objective, summing to `total_budget`."""
    return f"""You are a meticulous curriculum planner allocating teaching time.

<context>
Subject: {subject}
Lesson hours ({TIME_UNIT}) per week: {weekly_hours}
Objectives, each with its original `index`:
{_json_block(items)}
</context>

<instructions>
1. The total to distribute over ALL objectives is exactly {total_budget} {TIME_UNIT}
   ({weekly_hours} {TIME_UNIT}/week x {EFFECTIVE_WEEKS_PER_YEAR} effective weeks).
2. Weigh each objective by complexity: higher-order (C4-C6) or practical
   objectives get more time (e.g. 4-8 {TIME_UNIT}), introductory ones less (2-3 {TIME_UNIT}).
3. Add up your allocation and adjust until it equals {total_budget} {TIME_UNIT} exactly.
4. Never give every objective the same allocation.
5. Each value MUST be a positive whole number, a space, then "{TIME_UNIT}" (e.g. "4 {TIME_UNIT}").
</instructions>

<output_format>
[{{"index": 0, "alokasiWaktu": "4 {TIME_UNIT}"}}, {{"index": 1, "alokasiWaktu": "6 {TIME_UNIT}"}}]
</output_format>

{_JSON_ONLY}
"""


# -----------------------------------------------------------------------------
# Mastery criteria (KKTP)
# -----------------------------------------------------------------------------


def build_criteria_prompt(
    subject: str,
    grade: str,
    semester: str,
    items: list[dict[str, Any]],
) -> str:
    """Prompt asking for four-level mastery criteria per objective."""
    levels = ", ".join(f"`{level}`" for level in MASTERY_LEVELS)
    return f"""You are an expert in learning assessment.
Write the mastery criteria (KKTP) for each learning objective below.

<context>
Subject: {subject}
Grade: {grade}
Semester: {semester}
Objectives, each with its `index`:
{_json_block(items)}
</context>

<instructions>
1. For every objective write clear, measurable criteria for the four levels: {levels}.
2. Choose ONE level as the minimum target (`targetKktp`); it must be one of {levels}.
3. Return one object per input objective, in input order, exactly {len(items)} objects.
</instructions>

<output_format>
[{{"index": 0, "kriteria": {{"sangatMahir": "...", "mahir": "...", "cukupMahir": "...", "perluBimbingan": "..."}}, "targetKktp": "mahir"}}]
</output_format>

{_JSON_ONLY}
"""


# -----------------------------------------------------------------------------
# Semester schedule (PROSEM)
# -----------------------------------------------------------------------------


def build_schedule_prompt(
    semester: str,
    months: list[str],
    weeks_per_month: int,
    items: list[dict[str, Any]],
) -> str:
    """Prompt asking to spread each item's hours over the weeks of a semester."""
    example_month = months[0] if months else "Juli"
    month_list = ", ".join(months)
    return f"""You are an academic scheduler.
Distribute teaching hours ({TIME_UNIT}) into weekly slots for a semester program (PROSEM).

<context>
Semester: {semester}
Months: {month_list}
Weeks per month: {weeks_per_month}
Items to distribute:
{_json_block(items)}
</context>

<instructions>
1. For each item, distribute its `total_jp` over the available weeks.
2. The weekly values of an item MUST add up to its `total_jp` exactly.
3. Return one object per item, keyed by its `id`.
</instructions>

<output_format>
[{{"id": 1, "bulan": {{"{example_month}": [2, 2, 0, 0, 0]}}, "keterangan": "optional short note"}}]
</output_format>

{_JSON_ONLY}
"""
