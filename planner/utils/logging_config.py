"""Logging setup shared by the CLI entry points.

Library modules only create `logging.getLogger(__name__)`; configuring
handlers is left to whoever runs the program.
"""

from __future__ import annotations

import logging

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbose: bool = False, level: int | None = None) -> None:
    """Configure root logging with the project format.

    Args:
        verbose: If True, sets level to DEBUG. Overrides `level`.
        level: Explicit logging level. Defaults to INFO.
    """
    if verbose:
        effective_level = logging.DEBUG
    elif level is not None:
        effective_level = level
    else:
        effective_level = logging.INFO

    logging.basicConfig(level=effective_level, format=DEFAULT_LOG_FORMAT)
