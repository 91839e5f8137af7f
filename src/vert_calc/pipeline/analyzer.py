"""Video analysis pipeline orchestration."""

from __future__ import annotations

import math
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from vert_calc.analysis.calculator import HeightCalculator, extract_pose_data, round_half_up
from vert_calc.core.config import Settings, get_settings
from vert_calc.core.exceptions import (
    AnalysisCancelledError,
    AnalysisInProgressError,
    DetectorUnavailableError,
)
from vert_calc.core.logging import get_logger
from vert_calc.core.types import (
    Frame,
    FrameSource,
    HipObservation,
    JumpMeasurement,
    Keypoint,
    KeypointDetector,
    VideoInfo,
)
from vert_calc.video.source import VideoFileSource

logger = get_logger(__name__)

ProgressCallback = Callable[[int], None]

# Sources with an analysis in flight, by identity
_active_sources: set[int] = set()
_active_lock = threading.Lock()


@contextmanager
def _exclusive(source: FrameSource) -> Iterator[None]:
    """Hold the single analysis slot for a source."""
    key = id(source)
    with _active_lock:
        if key in _active_sources:
            raise AnalysisInProgressError()
        _active_sources.add(key)
    try:
        yield
    finally:
        with _active_lock:
            _active_sources.discard(key)


@dataclass
class AnalysisResult:
    """Result of analyzing one video.

    Attributes:
        measurement: Final jump height
        info: Properties of the analyzed video
        samples_total: Number of sample instants visited
        observations: Hip observations that were extracted, in time order
        body_heights: Nose-to-ankle spans used for calibration
    """

    measurement: JumpMeasurement
    info: VideoInfo
    samples_total: int
    observations: list[HipObservation] = field(default_factory=list)
    body_heights: list[float] = field(default_factory=list)

    @property
    def detection_rate(self) -> float:
        """Fraction of samples that yielded a hip observation."""
        if self.samples_total == 0:
            return 0.0
        return len(self.observations) / self.samples_total


class JumpAnalyzer:
    """Orchestrates vision-based jump measurement over a video.

    Coordinates:
    - Frame sampling at a fixed rate with bounded seeks
    - Keypoint detection per sampled frame
    - Hip and body-span extraction
    - Height calculation
    """

    def __init__(
        self,
        detector: KeypointDetector,
        settings: Settings | None = None,
    ) -> None:
        """Initialize analyzer.

        Args:
            detector: Keypoint detector, shared across analyses
            settings: Application settings (uses defaults if None)
        """
        self.detector = detector
        self.settings = settings or get_settings()
        self._calculator = HeightCalculator(self.settings.estimator)

    def _detect(self, frame: Frame) -> list[Keypoint]:
        """Run the detector, surfacing any failure as DetectorUnavailableError."""
        try:
            return self.detector.estimate(frame)
        except DetectorUnavailableError:
            raise
        except Exception as e:
            raise DetectorUnavailableError(
                f"Detector failed at {frame.timestamp:.3f}s: {e}"
            ) from e

    def _load_detector(self) -> None:
        try:
            self.detector.load()
        except DetectorUnavailableError:
            raise
        except Exception as e:
            raise DetectorUnavailableError(f"Failed to load detector: {e}") from e

    def analyze(
        self,
        source: FrameSource,
        user_height_cm: float,
        on_progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> AnalysisResult:
        """Measure the jump in a video.

        Samples are visited in strictly increasing time order. Frames where
        no hip is found are skipped.

        Args:
            source: Seekable video, exclusively used by this analysis
            user_height_cm: Subject's standing height for calibration
            on_progress: Called with a percentage after each sample
            cancel: Checked before each sample; set it to abort

        Returns:
            AnalysisResult with the measurement and collected data

        Raises:
            AnalysisInProgressError: Another analysis is using this source
            AnalysisCancelledError: ``cancel`` was set
            DetectorUnavailableError: Detector failed to load or run
            InsufficientPoseDataError: Too few hip observations
            LowConfidenceError: Too few confident hip observations
            JumpTooSmallError: Height below the measurable minimum
        """
        with _exclusive(source):
            info = source.info
            sampling = self.settings.sampling
            rate = sampling.sample_rate_hz
            total = math.floor(info.duration_s * rate)

            self._load_detector()
            logger.info(
                "Analyzing %.2fs video at %.0f Hz (%d samples)",
                info.duration_s,
                rate,
                total,
            )

            observations: list[HipObservation] = []
            body_heights: list[float] = []
            min_confidence = self.settings.estimator.keypoint_confidence

            for i in range(total):
                if cancel is not None and cancel.is_set():
                    logger.info("Analysis cancelled at sample %d/%d", i, total)
                    raise AnalysisCancelledError()

                sample_time = i / rate
                frame = source.seek(sample_time, timeout=sampling.seek_timeout_s)

                if frame is not None:
                    pose_data = extract_pose_data(self._detect(frame), min_confidence)

                    if pose_data is not None:
                        observations.append(
                            HipObservation(
                                time=sample_time,
                                hip_y=pose_data.hip_y,
                                confidence=pose_data.confidence,
                            )
                        )
                        if pose_data.body_height is not None and pose_data.body_height > 0:
                            body_heights.append(pose_data.body_height)

                if on_progress is not None:
                    on_progress(int(round_half_up(i / total * 100, 0)))

            if on_progress is not None and total > 0:
                on_progress(100)

            logger.info(
                "Collected %d hip observations and %d body spans from %d samples",
                len(observations),
                len(body_heights),
                total,
            )

            measurement = self._calculator.calculate(
                observations,
                body_heights,
                user_height_cm,
                info.height,
            )
            logger.info("Measured jump: %.1f cm", measurement.height_cm)

            return AnalysisResult(
                measurement=measurement,
                info=info,
                samples_total=total,
                observations=observations,
                body_heights=body_heights,
            )

    def analyze_jump(
        self,
        source: FrameSource,
        user_height_cm: float,
        on_progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> JumpMeasurement:
        """Measure the jump in a video and return only the measurement."""
        return self.analyze(source, user_height_cm, on_progress, cancel).measurement

    def analyze_file(
        self,
        path: str | Path,
        user_height_cm: float,
        on_progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> AnalysisResult:
        """Open a video file and measure the jump in it.

        Raises:
            VideoSourceError: If the file cannot be opened
        """
        with VideoFileSource(path) as source:
            return self.analyze(source, user_height_cm, on_progress, cancel)
