#!/usr/bin/env python3
"""Validate vision-based jump height accuracy.

Run the pose-tracking estimator over a set of recorded videos and compare
the measured heights against known reference values.

Manifest CSV columns: video,user_height_cm,reference_cm
(video paths are resolved relative to the manifest).
"""

from __future__ import annotations

import argparse
import csv
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from vert_calc.core.config import get_settings
from vert_calc.core.exceptions import VertCalcError
from vert_calc.core.logging import get_logger, setup_logging
from vert_calc.pipeline.analyzer import JumpAnalyzer
from vert_calc.vision.pose import get_shared_estimator

logger = get_logger(__name__)


@dataclass
class ManifestEntry:
    """One video to validate."""

    video: Path
    user_height_cm: float
    reference_cm: float | None


@dataclass
class ValidationResult:
    """Result of validating a single video."""

    video: Path
    measured_height_cm: float | None
    reference_height_cm: float | None
    error_cm: float | None
    error_percent: float | None
    failure: str | None = None


@dataclass
class ValidationSummary:
    """Summary statistics for validation run."""

    total_videos: int
    measured_videos: int
    failed_videos: int
    mean_absolute_error_cm: float | None
    std_error_cm: float | None
    max_error_cm: float | None
    mean_error_percent: float | None


def load_manifest(csv_path: Path) -> list[ManifestEntry]:
    """Load the list of videos and reference heights.

    Args:
        csv_path: Path to manifest CSV

    Returns:
        Manifest entries in file order
    """
    entries = []

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            reference = (row.get("reference_cm") or "").strip()
            entries.append(
                ManifestEntry(
                    video=csv_path.parent / row["video"],
                    user_height_cm=float(row["user_height_cm"]),
                    reference_cm=float(reference) if reference else None,
                )
            )

    logger.info("Loaded %d manifest entries", len(entries))
    return entries


def validate_entry(analyzer: JumpAnalyzer, entry: ManifestEntry) -> ValidationResult:
    """Measure one video and compare against its reference."""
    try:
        result = analyzer.analyze_file(entry.video, entry.user_height_cm)
    except VertCalcError as e:
        logger.warning("%s: %s", entry.video.name, e)
        return ValidationResult(
            video=entry.video,
            measured_height_cm=None,
            reference_height_cm=entry.reference_cm,
            error_cm=None,
            error_percent=None,
            failure=e.code,
        )

    measured = result.measurement.height_cm
    error = None
    error_pct = None
    if entry.reference_cm is not None:
        error = measured - entry.reference_cm
        error_pct = (error / entry.reference_cm * 100) if entry.reference_cm > 0 else None

    return ValidationResult(
        video=entry.video,
        measured_height_cm=measured,
        reference_height_cm=entry.reference_cm,
        error_cm=error,
        error_percent=error_pct,
    )


def compute_summary(results: list[ValidationResult]) -> ValidationSummary:
    """Compute summary statistics from validation results.

    Args:
        results: Individual validation results

    Returns:
        ValidationSummary with statistics
    """
    measured = [r for r in results if r.measured_height_cm is not None]
    errors = [abs(r.error_cm) for r in measured if r.error_cm is not None]
    error_pcts = [abs(r.error_percent) for r in measured if r.error_percent is not None]

    if not errors:
        return ValidationSummary(
            total_videos=len(results),
            measured_videos=len(measured),
            failed_videos=len(results) - len(measured),
            mean_absolute_error_cm=None,
            std_error_cm=None,
            max_error_cm=None,
            mean_error_percent=None,
        )

    return ValidationSummary(
        total_videos=len(results),
        measured_videos=len(measured),
        failed_videos=len(results) - len(measured),
        mean_absolute_error_cm=float(np.mean(errors)),
        std_error_cm=float(np.std(errors)),
        max_error_cm=max(errors),
        mean_error_percent=float(np.mean(error_pcts)) if error_pcts else None,
    )


def print_results(
    results: list[ValidationResult],
    summary: ValidationSummary,
    target_cm: float,
) -> None:
    """Print validation results to console."""
    print("\n" + "=" * 72)
    print("VALIDATION RESULTS")
    print("=" * 72)

    print(f"{'Video':<28} {'Measured':<10} {'Reference':<10} {'Error':<10} {'Error %':<10}")
    print("-" * 72)

    for r in results:
        measured_str = (
            f"{r.measured_height_cm:.1f}" if r.measured_height_cm is not None else r.failure
        )
        ref_str = f"{r.reference_height_cm:.1f}" if r.reference_height_cm is not None else "N/A"
        err_str = f"{r.error_cm:+.1f}" if r.error_cm is not None else "N/A"
        pct_str = f"{r.error_percent:+.1f}%" if r.error_percent is not None else "N/A"

        name = r.video.name[:27]
        print(f"{name:<28} {measured_str:<10} {ref_str:<10} {err_str:<10} {pct_str:<10}")

    print("\n" + "=" * 72)
    print("SUMMARY")
    print("=" * 72)
    print(f"Videos:              {summary.total_videos}")
    print(f"Measured:            {summary.measured_videos}")
    print(f"Failed:              {summary.failed_videos}")

    if summary.mean_absolute_error_cm is not None:
        print(f"\nMean Absolute Error: {summary.mean_absolute_error_cm:.2f} cm")
        print(f"Std Dev Error:       {summary.std_error_cm:.2f} cm")
        print(f"Max Error:           {summary.max_error_cm:.2f} cm")

        if summary.mean_error_percent is not None:
            print(f"Mean Error %:        {summary.mean_error_percent:.1f}%")

        verdict = "PASS" if summary.mean_absolute_error_cm <= target_cm else "FAIL"
        print(
            f"\n{verdict}: Mean error {summary.mean_absolute_error_cm:.2f} cm "
            f"(target {target_cm} cm)"
        )


def main() -> int:
    """Run validation script."""
    parser = argparse.ArgumentParser(description="Validate jump height measurement accuracy")
    parser.add_argument(
        "manifest",
        type=Path,
        help="CSV with video,user_height_cm,reference_cm columns",
    )
    parser.add_argument(
        "--target-cm",
        type=float,
        default=5.0,
        help="Acceptable mean absolute error (default: 5)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output CSV for results",
    )

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.logging.level)

    entries = load_manifest(args.manifest)
    if not entries:
        logger.warning("Manifest is empty")
        return 1

    analyzer = JumpAnalyzer(get_shared_estimator(), settings)
    results = [validate_entry(analyzer, entry) for entry in entries]
    summary = compute_summary(results)

    print_results(results, summary, args.target_cm)

    if args.output:
        with open(args.output, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["video", "measured_cm", "reference_cm", "error_cm", "error_percent", "failure"]
            )
            for r in results:
                writer.writerow(
                    [
                        r.video,
                        "" if r.measured_height_cm is None else r.measured_height_cm,
                        "" if r.reference_height_cm is None else r.reference_height_cm,
                        "" if r.error_cm is None else r.error_cm,
                        "" if r.error_percent is None else r.error_percent,
                        r.failure or "",
                    ]
                )
        logger.info("Results saved to %s", args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
