"""Chunked, paced generation over large workloads."""

from planner.batching.orchestrator import (
    BatchAccumulator,
    BatchResult,
    ChunkFailure,
    chunk_ranges,
    run_batched,
)

__all__ = [
    "BatchAccumulator",
    "BatchResult",
    "ChunkFailure",
    "chunk_ranges",
    "run_batched",
]
