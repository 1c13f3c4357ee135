"""Tolerant JSON parsing for generative-service responses.

Gemini follows the requested JSON shape most of the time, but not always:
it drops the comma between sibling objects, leaves keys unquoted, adds
trailing commas or `//` comments, and emits invalid escapes such as `\\(`
inside LaTeX fragments. `parse_tolerant` tries a strict parse first and, only
if that fails, applies one fixed pass of textual repairs before a single
re-parse.

All functions here are pure: text in, text (or value) out.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable

from planner.errors import MalformedResponse
from planner.parsing.sanitizer import sanitize_response

logger = logging.getLogger(__name__)

_STRING_LITERAL = re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL)

_MISSING_OBJECT_SEP = re.compile(r"\}(\s*)\{")
_MISSING_ARRAY_SEP = re.compile(r"\](\s*)\[")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$]*)(\s*:)")
_TRAILING_SEP = re.compile(r",(\s*[}\]])")
_ESCAPE = re.compile(r"\\(.)", re.DOTALL)

# Characters allowed after a backslash in JSON strings
_VALID_ESCAPES = frozenset('"\\/bfnrtu')


# -----------------------------------------------------------------------------
# Segment helpers
# -----------------------------------------------------------------------------


def _map_segments(
    text: str,
    outside: Callable[[str], str],
    inside: Callable[[str], str] | None = None,
) -> str:
    """Apply `outside` to text between string literals and `inside` to the literals."""
    parts: list[str] = []
    pos = 0
    for match in _STRING_LITERAL.finditer(text):
        parts.append(outside(text[pos:match.start()]))
        literal = match.group(0)
        parts.append(inside(literal) if inside else literal)
        pos = match.end()
    parts.append(outside(text[pos:]))
    return "".join(parts)


def strip_line_comments(text: str) -> str:
    """Remove `//` comments that run to end of line, leaving string contents alone."""
    out: list[str] = []
    in_string = False
    escaped = False
    i = 0
    while i < len(text):
        char = text[i]
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            i += 1
            continue
        if char == '"':
            in_string = True
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            if newline == -1:
                break
            i = newline
            continue
        out.append(char)
        i += 1
    return "".join(out)


def _has_top_level_separator(text: str) -> bool:
    """True when a comma appears outside any bracket, i.e. sibling root values."""
    depth = 0
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
        elif char == "," and depth == 0:
            return True
    return False


# -----------------------------------------------------------------------------
# Repairs
# -----------------------------------------------------------------------------


def _repair_structure(segment: str) -> str:
    segment = _MISSING_OBJECT_SEP.sub(r"},\1{", segment)
    segment = _MISSING_ARRAY_SEP.sub(r"],\1[", segment)
    segment = _BARE_KEY.sub(r'\1"\2"\3', segment)
    return _TRAILING_SEP.sub(r"\1", segment)


def _fix_invalid_escapes(literal: str) -> str:
    """Double the backslash of escape sequences JSON does not allow."""
    return _ESCAPE.sub(
        lambda m: m.group(0) if m.group(1) in _VALID_ESCAPES else "\\\\" + m.group(1),
        literal,
    )


def repair_json_text(text: str) -> str:
    """
    Apply the fixed set of textual repairs, once, in order.

    1. Insert the missing comma between `}{` and `][` pairs.
    2. Quote bare identifier keys followed by a colon.
    3. Remove trailing commas before `}` or `]`.
    4. Escape backslashes that start an invalid escape sequence.
    5. Wrap sibling top-level values in a list.

    Repairs 1-3 only touch text outside string literals.
    """
    repaired = _map_segments(text, _repair_structure, _fix_invalid_escapes).strip()
    if repaired[:1] in ("{", "[") and _has_top_level_separator(repaired):
        repaired = f"[{repaired}]"
    return repaired


# -----------------------------------------------------------------------------
# Public parse API
# -----------------------------------------------------------------------------


def parse_tolerant(text: str, original: str | None = None) -> Any:
    """
    Parse sanitized response text, repairing common syntax slips.

    Args:
        text: Candidate JSON text (usually the output of `sanitize_response`).
        original: Unsanitized response, kept on the raised error for diagnostics.

    Returns:
        The parsed JSON value.

    Raises:
        MalformedResponse: If the text does not parse even after repairs.
    """
    cleaned = strip_line_comments(text).strip()
    # RecursionError: nesting deeper than the interpreter recursion limit
    try:
        return json.loads(cleaned)
    except (json.JSONDecodeError, RecursionError):
        pass

    repaired = repair_json_text(cleaned)
    try:
        value = json.loads(repaired)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.debug("Repair pass failed to produce valid JSON: %s", e)
        raise MalformedResponse(
            f"Failed to parse JSON response after repairs: {e}",
            raw_text=original if original is not None else text,
        ) from e

    logger.debug("Parsed response after applying textual repairs")
    return value


def parse_response(raw: str) -> Any:
    """Sanitize and parse one raw service response."""
    return parse_tolerant(sanitize_response(raw), original=raw)
