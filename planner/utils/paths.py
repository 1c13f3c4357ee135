"""Path constants for the planner data directory.

Usage:
    from planner.utils.paths import DOCUMENTS_DIR

    store = DocumentStore(DOCUMENTS_DIR)
"""

from __future__ import annotations

from pathlib import Path

# This file is at: planner/utils/paths.py
REPO_ROOT = Path(__file__).resolve().parents[2]

PLANNER_DIR = REPO_ROOT / "planner"

DATA_DIR = PLANNER_DIR / "data"

# One JSON file per document collection
DOCUMENTS_DIR = DATA_DIR / "documents"
