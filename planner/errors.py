"""Exception types raised by the planning pipeline.

Only failures that leave no usable artifact propagate to callers. Everything
else (shape mismatches, bad rows, failed chunks) is recovered where it happens
and reported through result warnings.
"""

from __future__ import annotations


class MalformedResponse(ValueError):
    """The service response could not be parsed, even after repairs."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class ArtifactGenerationError(RuntimeError):
    """No usable artifact could be produced."""


class UnknownActionError(ValueError):
    """The requested generation action is not supported."""


class DocumentNotFoundError(KeyError):
    """A document id does not exist in its collection."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "document not found"
