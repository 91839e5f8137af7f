"""Command line entry point for Vert Calc."""

from __future__ import annotations

import argparse
import sys

from tqdm import tqdm

from vert_calc.analysis.classifier import classify
from vert_calc.analysis.kinematics import MarkSession
from vert_calc.core.config import Settings, get_settings
from vert_calc.core.exceptions import (
    AnalysisCancelledError,
    VertCalcError,
    VideoSourceError,
)
from vert_calc.core.logging import get_logger, setup_logging
from vert_calc.core.types import JumpMeasurement
from vert_calc.pipeline.analyzer import JumpAnalyzer
from vert_calc.vision.pose import get_shared_estimator

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_MEASUREMENT_FAILED = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERRUPTED = 130


def format_result(measurement: JumpMeasurement) -> str:
    """Render a measurement and its category for the terminal."""
    category = classify(measurement.height_cm)

    lines = [
        f"Jump height: {measurement.rounded_cm} cm ({measurement.height_in:.1f} in)",
    ]
    if measurement.air_time_s is not None:
        lines.append(f"Air time to peak: {measurement.air_time_s:.3f}s")
    lines.append(f"Category: {category.label}")
    lines.append(category.context)

    return "\n".join(lines)


def run_manual(takeoff: float, peak: float, settings: Settings) -> int:
    """Estimate height from marked takeoff and peak times.

    Returns:
        Exit code
    """
    session = MarkSession(settings.manual)
    session.mark_takeoff(takeoff)
    session.mark_peak(peak)
    logger.debug(session.instruction)

    try:
        measurement = session.calculate()
    except VertCalcError as e:
        logger.error("Manual estimate failed: %s", e)
        print(e.message, file=sys.stderr)
        return EXIT_INPUT_ERROR

    print(format_result(measurement))
    return EXIT_OK


def run_analysis(video: str, user_height_cm: float, settings: Settings) -> int:
    """Measure the jump in a video file.

    Returns:
        Exit code
    """
    analyzer = JumpAnalyzer(get_shared_estimator(), settings)

    try:
        with tqdm(total=100, desc="Analyzing", unit="%") as pbar:

            def on_progress(percent: int) -> None:
                pbar.update(percent - pbar.n)

            result = analyzer.analyze_file(video, user_height_cm, on_progress=on_progress)

    except VideoSourceError as e:
        logger.error("Video error: %s", e)
        print(e.message, file=sys.stderr)
        return EXIT_INPUT_ERROR

    except AnalysisCancelledError:
        return EXIT_INTERRUPTED

    except VertCalcError as e:
        logger.error("Analysis failed [%s]: %s", e.code, e)
        print(e.message, file=sys.stderr)
        return EXIT_MEASUREMENT_FAILED

    logger.info(
        "Detected pose in %.0f%% of %d samples",
        result.detection_rate * 100,
        result.samples_total,
    )
    print(format_result(result.measurement))
    return EXIT_OK


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    user = settings.user

    def user_height(value: str) -> float:
        height = float(value)
        if not user.min_height_cm <= height <= user.max_height_cm:
            raise argparse.ArgumentTypeError(
                f"height must be between {user.min_height_cm:.0f} "
                f"and {user.max_height_cm:.0f} cm"
            )
        return height

    def mark_time(value: str) -> float:
        time_s = float(value)
        if time_s < 0:
            raise argparse.ArgumentTypeError("time must be non-negative")
        return time_s

    def sample_rate(value: str) -> float:
        rate = float(value)
        if rate <= 0:
            raise argparse.ArgumentTypeError("rate must be positive")
        return rate

    parser = argparse.ArgumentParser(
        prog="vert-calc",
        description="Vert Calc - Vertical jump height from video",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    manual = subparsers.add_parser(
        "manual",
        help="Height from marked takeoff and peak times (h = 1/2 g t^2)",
    )
    manual.add_argument("--takeoff", type=mark_time, required=True, help="Takeoff time in seconds")
    manual.add_argument("--peak", type=mark_time, required=True, help="Peak time in seconds")

    analyze = subparsers.add_parser(
        "analyze",
        help="Height from pose tracking in a video",
    )
    analyze.add_argument("video", help="Path to the jump video")
    analyze.add_argument(
        "--height-cm",
        type=user_height,
        required=True,
        help="Your standing height in centimeters",
    )
    analyze.add_argument(
        "--rate",
        type=sample_rate,
        default=None,
        help=f"Samples per second (default: {settings.sampling.sample_rate_hz:g})",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    settings = get_settings()
    args = _build_parser(settings).parse_args(argv)

    level = "DEBUG" if args.debug else settings.logging.level
    setup_logging(level, settings.logging.file)

    try:
        if args.command == "manual":
            exit_code = run_manual(args.takeoff, args.peak, settings)
        else:
            if args.rate is not None:
                settings = settings.model_copy(
                    update={
                        "sampling": settings.sampling.model_copy(
                            update={"sample_rate_hz": args.rate}
                        )
                    }
                )
            exit_code = run_analysis(args.video, args.height_cm, settings)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = EXIT_INTERRUPTED

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
