"""Shared constants for the tp-planner application.

This module centralizes constants used across multiple modules to ensure
consistency between prompt building, validation and reconciliation.

Constants defined here:
- Semester labels and their month calendars
- Mastery (KKTP) levels
- Time-budget unit and defaults
- Batching defaults
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Semester Constants
# -----------------------------------------------------------------------------

SEMESTER_ODD = "Ganjil"
SEMESTER_EVEN = "Genap"

VALID_SEMESTERS = (SEMESTER_ODD, SEMESTER_EVEN)

SEMESTER_MONTHS = {
    SEMESTER_ODD: ("Juli", "Agustus", "September", "Oktober", "November", "Desember"),
    SEMESTER_EVEN: ("Januari", "Februari", "Maret", "April", "Mei", "Juni"),
}

WEEKS_PER_MONTH = 5

# Effective teaching weeks in one academic year
EFFECTIVE_WEEKS_PER_YEAR = 32


# -----------------------------------------------------------------------------
# Mastery level (KKTP) Constants
# -----------------------------------------------------------------------------

MASTERY_LEVELS = ("sangatMahir", "mahir", "cukupMahir", "perluBimbingan")

DEFAULT_TARGET_LEVEL = "cukupMahir"


# -----------------------------------------------------------------------------
# Time budget Constants
# -----------------------------------------------------------------------------

TIME_UNIT = "JP"

TIME_BUDGET_PATTERN = rf"^[1-9]\d* {TIME_UNIT}$"

DEFAULT_TIME_BUDGET = f"2 {TIME_UNIT}"


# -----------------------------------------------------------------------------
# Placeholders and defaults
# -----------------------------------------------------------------------------

PLACEHOLDER_CODE = "N/A"
PLACEHOLDER_TOPIC = "[unmatched]"

DEFAULT_CRITERION_TEXT = "[not generated] criteria unavailable, please fill in manually"


# -----------------------------------------------------------------------------
# Batching Constants
# -----------------------------------------------------------------------------

DEFAULT_CHUNK_SIZE = 5

# Minimum delay between two chunk requests (seconds)
DEFAULT_PACING_SECONDS = 2.0
