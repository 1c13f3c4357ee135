"""Extraction and tolerant parsing of structured data in service responses."""

from planner.parsing.repair import (
    parse_response,
    parse_tolerant,
    repair_json_text,
    strip_line_comments,
)
from planner.parsing.sanitizer import sanitize_response

__all__ = [
    "sanitize_response",
    "parse_tolerant",
    "parse_response",
    "repair_json_text",
    "strip_line_comments",
]
