"""Response sanitizer.

Extracts the candidate JSON substring from a free-form service response.
This is a best-effort heuristic: it may return text that still does not
parse, and leaves that failure to the tolerant parser.
"""

from __future__ import annotations

import re

_FENCE_RE = re.compile(r"```[\w-]*[ \t]*\n?(.*?)```", re.DOTALL)

_CLOSERS = {"{": "}", "[": "]"}


def sanitize_response(text: str) -> str:
    """
    Extract one structured-data candidate from a response.

    1. If a fenced code block exists, return its interior.
    2. Otherwise return the span from the first `{` or `[` (whichever comes
       first) to the last matching closing character, inclusive.
    3. If there is no bracket at all, return the trimmed text unchanged.

    Args:
        text: Raw response text, possibly wrapped in prose or markdown.

    Returns:
        The candidate substring.
    """
    fence = _FENCE_RE.search(text)
    if fence:
        return fence.group(1).strip()

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return text.strip()

    start = min(starts)
    end = text.rfind(_CLOSERS[text[start]])
    if end <= start:
        return text.strip()
    return text[start:end + 1]
