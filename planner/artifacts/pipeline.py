"""Command-line pipeline for deriving one artifact from a JSON input file.

Usage:
    python -m planner.artifacts.pipeline flow --input curriculum.json
    python -m planner.artifacts.pipeline allocation --input flow.json --weekly-hours 4
    python -m planner.artifacts.pipeline criteria --input flow.json --semester Ganjil
    python -m planner.artifacts.pipeline schedule --input allocation.json --semester Genap
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from planner.artifacts.allocation import generate_allocation
from planner.artifacts.criteria import generate_criteria
from planner.artifacts.flow import generate_flow
from planner.artifacts.schedule import generate_schedule
from planner.errors import ArtifactGenerationError
from planner.gemini_client import TextGenerator, load_default_service
from planner.models import AllocationRow, CurriculumDocument, CurriculumTree, SequencedRow
from planner.models.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PACING_SECONDS,
    SEMESTER_ODD,
)
from planner.utils.logging_config import setup_logging
from planner.utils.paths import DATA_DIR

logger = logging.getLogger(__name__)

ARTIFACTS = ("flow", "allocation", "criteria", "schedule")

DEFAULT_OUTPUT_DIR = DATA_DIR / "artifacts"


# -----------------------------------------------------------------------------
# Data classes
# -----------------------------------------------------------------------------


@dataclass
class PipelineConfig:
    """Configuration for one artifact run."""

    artifact: str
    input_path: Path
    output_path: Path | None = None
    subject: str = ""
    grade: str = ""
    semester: str = SEMESTER_ODD
    weekly_hours: int = 2
    chunk_size: int = DEFAULT_CHUNK_SIZE
    pacing_seconds: float = DEFAULT_PACING_SECONDS
    verbose: bool = False


@dataclass
class PipelineResult:
    """Result of running one artifact pipeline."""

    success: bool
    artifact: str = ""
    output_path: Path | None = None
    row_count: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Main pipeline
# -----------------------------------------------------------------------------


def run_artifact_pipeline(config: PipelineConfig, service: TextGenerator | None = None) -> PipelineResult:
    """
    Load the input document, generate the requested artifact and write it.

    Returns PipelineResult with success status and any errors/warnings.
    """
    result = PipelineResult(success=False, artifact=config.artifact)

    logger.info("=" * 60)
    logger.info("GENERATING %s FROM: %s", config.artifact.upper(), config.input_path)
    logger.info("=" * 60)

    try:
        data = _load_input(config.input_path)
    except Exception as e:
        result.errors.append(f"Failed to load input: {e}")
        return result

    if service is None:
        try:
            service = load_default_service()
            logger.info("✓ Service initialized")
        except Exception as e:
            result.errors.append(f"Failed to initialize service: {e}")
            return result

    try:
        rows = _generate(config, service, data, result)
    except ArtifactGenerationError as e:
        result.errors.append(str(e))
        return result
    except ValueError as e:
        result.errors.append(f"Invalid input: {e}")
        return result

    result.row_count = len(rows)
    _export_rows(config, rows, result)
    return result


def _generate(
    config: PipelineConfig,
    service: TextGenerator,
    data: Any,
    result: PipelineResult,
) -> list[dict[str, Any]]:
    """Dispatch on the artifact kind and return the rows as alias-keyed dicts."""
    if config.artifact == "flow":
        tree = _load_tree(data)
        subject = config.subject or (data.get("subject", "") if isinstance(data, dict) else "")
        flow = generate_flow(service, tree, subject=subject, grade=config.grade)
        result.warnings.extend(flow.warnings)
        logger.info("✓ Flow sequenced with %s strategy", flow.strategy.value)
        rows: list[Any] = flow.rows

    elif config.artifact == "allocation":
        flow_rows = [SequencedRow.model_validate(r) for r in _content(data)]
        allocation = generate_allocation(service, flow_rows, config.weekly_hours, subject=config.subject)
        result.warnings.extend(allocation.warnings)
        logger.info("✓ Allocated %d of %d hours", allocation.allocated_total, allocation.budget)
        rows = allocation.rows

    elif config.artifact == "criteria":
        flow_rows = [SequencedRow.model_validate(r) for r in _content(data)]
        criteria = generate_criteria(
            service,
            flow_rows,
            config.semester,
            subject=config.subject,
            grade=config.grade,
            chunk_size=config.chunk_size,
            pacing_seconds=config.pacing_seconds,
        )
        result.warnings.extend(criteria.warnings)
        rows = criteria.rows

    elif config.artifact == "schedule":
        allocation_rows = [AllocationRow.model_validate(r) for r in _content(data)]
        schedule = generate_schedule(service, allocation_rows, config.semester)
        result.warnings.extend(schedule.warnings)
        rows = schedule.rows

    else:
        raise ValueError(f"Unknown artifact: {config.artifact}")

    return [row.model_dump(by_alias=True) for row in rows]


def _export_rows(config: PipelineConfig, rows: list[dict[str, Any]], result: PipelineResult) -> None:
    output_path = config.output_path or DEFAULT_OUTPUT_DIR / f"{config.input_path.stem}_{config.artifact}.json"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        output_path.write_text(
            json.dumps({"content": rows}, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info("✓ Wrote: %s", output_path)
        result.success = True
        result.output_path = output_path
    except OSError as e:
        result.errors.append(f"Export failed: {e}")
        logger.exception("Export failed")


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _load_input(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def _load_tree(data: Any) -> CurriculumTree:
    """Accept a full curriculum document, a `{tpGroups}` tree or a bare group list."""
    if isinstance(data, list):
        return CurriculumTree.from_groups(data)
    if "subject" in data:
        return CurriculumDocument.model_validate(data)
    return CurriculumTree.model_validate(data)


def _content(data: Any) -> list[dict[str, Any]]:
    """Rows of an artifact file: either `{"content": [...]}` or a bare list."""
    if isinstance(data, dict):
        data = data.get("content", [])
    if not isinstance(data, list):
        raise ValueError("expected a list of rows")
    return data


# -----------------------------------------------------------------------------
# CLI
# -----------------------------------------------------------------------------


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Derive a curriculum artifact (flow, allocation, criteria, schedule).",
    )
    parser.add_argument("artifact", choices=ARTIFACTS, help="Artifact to generate")
    parser.add_argument("--input", type=Path, required=True, help="Input JSON document")
    parser.add_argument("--output", type=Path, help="Output JSON file")
    parser.add_argument("--subject", default="", help="Subject name for prompt context")
    parser.add_argument("--grade", default="", help="Grade for prompt context")
    parser.add_argument("--semester", default=SEMESTER_ODD, help="Ganjil or Genap")
    parser.add_argument("--weekly-hours", type=int, default=2, help="Lesson hours (JP) per week")
    parser.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, help="Rows per request")
    parser.add_argument("--pacing", type=float, default=DEFAULT_PACING_SECONDS, help="Seconds between requests")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose)

    if not args.input.exists():
        logger.error("File not found: %s", args.input)
        sys.exit(1)

    config = PipelineConfig(
        artifact=args.artifact,
        input_path=args.input,
        output_path=args.output,
        subject=args.subject,
        grade=args.grade,
        semester=args.semester,
        weekly_hours=args.weekly_hours,
        chunk_size=args.chunk_size,
        pacing_seconds=args.pacing,
        verbose=args.verbose,
    )

    result = run_artifact_pipeline(config)
    _print_results(result)
    sys.exit(0 if result.success else 1)


def _print_results(result: PipelineResult) -> None:
    """Print final results to stdout."""
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)

    if result.success:
        print(f"✓ SUCCESS: {result.row_count} {result.artifact} rows → {result.output_path}")
    else:
        print(f"✗ FAILED: {result.artifact}")

    if result.errors:
        print(f"\nErrors ({len(result.errors)}):")
        for err in result.errors:
            print(f"  ✗ {err}")

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for w in result.warnings:
            print(f"  ⚠ {w}")


if __name__ == "__main__":
    main()
