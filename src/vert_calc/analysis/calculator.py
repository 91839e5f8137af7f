"""Height calculation from hip observations.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

import numpy as np

from vert_calc.core.config import EstimatorSettings
from vert_calc.core.exceptions import (
    InsufficientPoseDataError,
    JumpTooSmallError,
    LowConfidenceError,
)
from vert_calc.core.logging import get_logger
from vert_calc.core.types import (
    HipObservation,
    JumpMeasurement,
    Keypoint,
    KeypointName,
    PoseData,
)

logger = get_logger(__name__)


def _fuse_pair(
    first: Keypoint | None,
    second: Keypoint | None,
    min_confidence: float,
) -> tuple[float, float] | None:
    """Fuse a left/right landmark pair into one (y, confidence).

    Both confident: average. One confident: use it alone. Neither: None.
    """
    valid = [kp for kp in (first, second) if kp is not None and kp.confidence > min_confidence]
    if not valid:
        return None

    y = sum(kp.y for kp in valid) / len(valid)
    confidence = sum(kp.confidence for kp in valid) / len(valid)
    return y, confidence


def extract_pose_data(
    keypoints: Iterable[Keypoint],
    min_confidence: float = 0.3,
) -> PoseData | None:
    """Extract hip position and body span from one frame's keypoints.

    Args:
        keypoints: Detector output for a single frame
        min_confidence: Minimum score for a landmark to be used

    Returns:
        PoseData, or None when neither hip is confident
    """
    by_name = {kp.name: kp for kp in keypoints}

    hip = _fuse_pair(
        by_name.get(KeypointName.LEFT_HIP),
        by_name.get(KeypointName.RIGHT_HIP),
        min_confidence,
    )
    if hip is None:
        return None

    hip_y, hip_confidence = hip

    body_height: float | None = None
    ankle = _fuse_pair(
        by_name.get(KeypointName.LEFT_ANKLE),
        by_name.get(KeypointName.RIGHT_ANKLE),
        min_confidence,
    )
    nose = by_name.get(KeypointName.NOSE)

    if ankle is not None and nose is not None and nose.confidence > min_confidence:
        body_height = abs(ankle[0] - nose.y)

    return PoseData(hip_y=hip_y, confidence=hip_confidence, body_height=body_height)


def lower_median(values: Sequence[float]) -> float:
    """Middle element of the sorted values.

    For even counts this is the element at index ``n // 2``, not the mean
    of the two middle elements.

    Raises:
        ValueError: If values is empty
    """
    if not values:
        raise ValueError("lower_median() requires at least one value")

    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def compute_pixel_scale(
    body_heights: Sequence[float],
    user_height_cm: float,
    video_height: int,
    settings: EstimatorSettings,
) -> float:
    """Centimeters per pixel at the subject's distance.

    Args:
        body_heights: Nose-to-ankle spans in pixels
        user_height_cm: Subject's real standing height
        video_height: Frame height in pixels, used when body data is sparse
        settings: Estimator settings

    Returns:
        Scale factor in cm per pixel
    """
    if len(body_heights) >= settings.min_calibration_samples:
        median_body_height = lower_median(body_heights)
        full_height_px = median_body_height / settings.body_span_ratio
        scale = user_height_cm / full_height_px
        logger.debug(
            "Body calibration: median span %.1f px -> %.4f cm/px",
            median_body_height,
            scale,
        )
        return scale

    estimated_height_px = video_height * settings.frame_fill_ratio
    scale = user_height_cm / estimated_height_px
    logger.debug(
        "Frame calibration fallback (%d body samples): %.4f cm/px",
        len(body_heights),
        scale,
    )
    return scale


def standing_baseline(
    observations: Sequence[HipObservation],
    settings: EstimatorSettings,
) -> float:
    """Hip Y position while standing before the jump.

    Averages the observations inside the leading baseline window; with too
    few of those, uses the lowest hip position (largest Y) seen.
    """
    early = [o.hip_y for o in observations if o.time < settings.baseline_window_s]

    if len(early) >= settings.min_baseline_samples:
        return float(np.mean(early))

    return float(np.max([o.hip_y for o in observations]))


def apply_sanity_adjustments(height_cm: float, settings: EstimatorSettings) -> float:
    """Clamp and correct a raw height.

    Negative heights become 0. Heights above the artifact threshold are
    halved once. The result must reach the minimum measurable height.

    Raises:
        JumpTooSmallError: If the adjusted height is below the minimum
    """
    if height_cm < 0:
        height_cm = 0.0

    if height_cm > settings.artifact_threshold_cm:
        logger.warning(
            "Height %.1f cm above %.0f cm, halving as likely detection artifact",
            height_cm,
            settings.artifact_threshold_cm,
        )
        height_cm = height_cm * 0.5

    if height_cm < settings.min_height_cm:
        raise JumpTooSmallError()

    return height_cm


def round_half_up(value: float, digits: int = 1) -> float:
    """Round with halves going up rather than to even."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


class HeightCalculator:
    """Calculates jump height from a hip observation series.

    Converts the hip displacement between the standing baseline and the
    apex into centimeters using a scale calibrated from the user's height.
    """

    def __init__(self, settings: EstimatorSettings | None = None) -> None:
        """Initialize calculator with settings.

        Args:
            settings: Estimator thresholds (uses defaults if None)
        """
        self.settings = settings or EstimatorSettings()

    def filter_confident(
        self, observations: Sequence[HipObservation]
    ) -> list[HipObservation]:
        """Validate and confidence-filter raw observations.

        Raises:
            InsufficientPoseDataError: If too few raw observations
            LowConfidenceError: If too few survive the filter
        """
        if len(observations) < self.settings.min_observations:
            raise InsufficientPoseDataError()

        confident = [o for o in observations if o.confidence > self.settings.filter_confidence]

        if len(confident) < self.settings.min_observations:
            raise LowConfidenceError()

        return confident

    def raw_height(
        self,
        observations: Sequence[HipObservation],
        pixel_scale: float,
    ) -> float:
        """Unadjusted height from filtered observations and a pixel scale."""
        standing_hip_y = standing_baseline(observations, self.settings)
        peak_hip_y = float(np.min([o.hip_y for o in observations]))

        displacement_px = standing_hip_y - peak_hip_y
        logger.debug(
            "Standing hip %.1f px, peak hip %.1f px, displacement %.1f px",
            standing_hip_y,
            peak_hip_y,
            displacement_px,
        )
        return displacement_px * pixel_scale

    def calculate(
        self,
        observations: Sequence[HipObservation],
        body_heights: Sequence[float],
        user_height_cm: float,
        video_height: int,
    ) -> JumpMeasurement:
        """Calculate jump height in centimeters.

        Args:
            observations: Hip observations in time order
            body_heights: Nose-to-ankle spans for calibration
            user_height_cm: Subject's standing height
            video_height: Frame height in pixels

        Returns:
            JumpMeasurement rounded to one decimal, without air time

        Raises:
            InsufficientPoseDataError: Too few hip observations
            LowConfidenceError: Too few confident hip observations
            JumpTooSmallError: Adjusted height below the minimum
        """
        confident = self.filter_confident(observations)
        pixel_scale = compute_pixel_scale(
            body_heights, user_height_cm, video_height, self.settings
        )

        height_cm = self.raw_height(confident, pixel_scale)
        height_cm = apply_sanity_adjustments(height_cm, self.settings)

        return JumpMeasurement(height_cm=round_half_up(height_cm, 1))
