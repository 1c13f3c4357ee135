"""Batched generation with pacing and partial-failure tolerance.

Large workloads are split into fixed-size contiguous chunks and sent to the
service one chunk at a time, strictly sequentially, with a mandatory pause
between chunks to stay under the service rate limit. Results are keyed by
absolute position in a caller-owned `BatchAccumulator`.

A chunk that fails (request error, unparsable response, misaligned item
count) is recorded and skipped; it never aborts the other chunks. Once all
chunks have run, every position still empty receives a labelled default, so
the artifact always has exactly one row per unit. Nothing is retried.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Sequence, TypeVar

from planner.errors import ArtifactGenerationError
from planner.models.constants import DEFAULT_CHUNK_SIZE, DEFAULT_PACING_SECONDS
from planner.parsing import parse_response

logger = logging.getLogger(__name__)

U = TypeVar("U")
T = TypeVar("T")


@dataclass
class ChunkFailure:
    """One chunk that produced no usable results."""

    chunk_index: int
    start: int
    stop: int
    reason: str


@dataclass
class BatchAccumulator(Generic[T]):
    """Results of one batch run, keyed by absolute position.

    Each orchestration call owns its accumulator; never share one between
    concurrent runs.
    """

    total: int
    results: dict[int, T] = field(default_factory=dict)
    failures: list[ChunkFailure] = field(default_factory=list)
    requests_made: int = 0

    def store(self, start: int, items: Sequence[T]) -> None:
        for offset, item in enumerate(items):
            self.results[start + offset] = item

    def missing_positions(self) -> list[int]:
        return [i for i in range(self.total) if i not in self.results]


@dataclass
class BatchResult(Generic[T]):
    """Merged batch output: exactly one item per input unit."""

    items: list[T]
    failures: list[ChunkFailure] = field(default_factory=list)
    defaulted_positions: list[int] = field(default_factory=list)
    chunk_count: int = 0

    @property
    def success(self) -> bool:
        return not self.failures


def chunk_ranges(total: int, chunk_size: int) -> list[range]:
    """Split `range(total)` into contiguous ranges of at most `chunk_size`."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [range(start, min(start + chunk_size, total)) for start in range(0, total, chunk_size)]


def run_batched(
    units: Sequence[U],
    *,
    request_chunk: Callable[[Sequence[U], int], str],
    align_chunk: Callable[[Any, Sequence[U], int], list[T]],
    default_factory: Callable[[int, U], T],
    accumulator: BatchAccumulator[T],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    pacing_seconds: float = DEFAULT_PACING_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchResult[T]:
    """
    Generate results for `units` chunk by chunk and merge them.

    Args:
        units: The workload, one unit per output row.
        request_chunk: Sends one chunk to the service and returns the raw
            response text. Receives the chunk and its absolute start offset.
        align_chunk: Turns the parsed response into exactly one result per
            unit of the chunk. Raises ValueError if it cannot.
        default_factory: Builds the labelled default for an unfilled position.
        accumulator: Caller-owned result store for this run.
        chunk_size: Maximum units per request.
        pacing_seconds: Pause before every chunk except the first.
        sleep: Sleep function (injectable for tests).

    Returns:
        BatchResult with `len(units)` items in input order.

    Raises:
        ArtifactGenerationError: If there were units but no chunk succeeded.
        ValueError: If the accumulator was sized for a different workload.
    """
    if accumulator.total != len(units):
        raise ValueError(f"Accumulator sized for {accumulator.total} units, got {len(units)}")
    ranges = chunk_ranges(len(units), chunk_size)
    logger.info(
        "Running %d units in %d chunks of up to %d (pacing %.1fs)",
        len(units),
        len(ranges),
        chunk_size,
        pacing_seconds,
    )

    for chunk_index, span in enumerate(ranges):
        if chunk_index > 0:
            sleep(pacing_seconds)

        chunk = units[span.start:span.stop]
        accumulator.requests_made += 1
        logger.info("Chunk %d/%d: units %d-%d", chunk_index + 1, len(ranges), span.start, span.stop - 1)

        try:
            raw = request_chunk(chunk, span.start)
            parsed = parse_response(raw)
            items = align_chunk(parsed, chunk, span.start)
            if len(items) != len(chunk):
                raise ValueError(f"expected {len(chunk)} items, got {len(items)}")
        except ValueError as e:
            _record_failure(accumulator, chunk_index, span, f"Unusable response: {e}")
            continue
        except Exception as e:
            _record_failure(accumulator, chunk_index, span, f"Request failed: {e}")
            continue

        accumulator.store(span.start, items)
        logger.info("✓ Chunk %d/%d merged", chunk_index + 1, len(ranges))

    if units and not accumulator.results:
        raise ArtifactGenerationError(
            f"All {len(ranges)} chunks failed: "
            + "; ".join(f.reason for f in accumulator.failures)
        )

    missing = accumulator.missing_positions()
    for position in missing:
        accumulator.results[position] = default_factory(position, units[position])
    if missing:
        logger.warning("Filled %d of %d positions with defaults", len(missing), len(units))

    return BatchResult(
        items=[accumulator.results[i] for i in range(len(units))],
        failures=list(accumulator.failures),
        defaulted_positions=missing,
        chunk_count=len(ranges),
    )


def _record_failure(
    accumulator: BatchAccumulator[Any],
    chunk_index: int,
    span: range,
    reason: str,
) -> None:
    failure = ChunkFailure(chunk_index=chunk_index, start=span.start, stop=span.stop, reason=reason)
    accumulator.failures.append(failure)
    logger.error("✗ Chunk %d (units %d-%d) skipped: %s", chunk_index + 1, span.start, span.stop - 1, reason)
