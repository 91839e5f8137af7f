"""Core data types and structures."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

import numpy as np
from numpy.typing import NDArray


class MarkRole(Enum):
    """Semantic role of a user-marked timestamp."""

    TAKEOFF = auto()
    PEAK = auto()


@dataclass(frozen=True, slots=True)
class TimeMark:
    """A marked instant in the video, in seconds from the start."""

    time: float
    role: MarkRole

    def __post_init__(self) -> None:
        if self.time < 0:
            raise ValueError(f"Mark time must be non-negative, got {self.time}")


class KeypointName(str, Enum):
    """Body landmark names reported by the pose detector."""

    NOSE = "nose"
    LEFT_EYE_INNER = "left_eye_inner"
    LEFT_EYE = "left_eye"
    LEFT_EYE_OUTER = "left_eye_outer"
    RIGHT_EYE_INNER = "right_eye_inner"
    RIGHT_EYE = "right_eye"
    RIGHT_EYE_OUTER = "right_eye_outer"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    MOUTH_LEFT = "mouth_left"
    MOUTH_RIGHT = "mouth_right"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_PINKY = "left_pinky"
    RIGHT_PINKY = "right_pinky"
    LEFT_INDEX = "left_index"
    RIGHT_INDEX = "right_index"
    LEFT_THUMB = "left_thumb"
    RIGHT_THUMB = "right_thumb"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"
    LEFT_HEEL = "left_heel"
    RIGHT_HEEL = "right_heel"
    LEFT_FOOT_INDEX = "left_foot_index"
    RIGHT_FOOT_INDEX = "right_foot_index"


@dataclass(frozen=True, slots=True)
class Keypoint:
    """A single detector observation of one body landmark.

    Coordinates are in image pixels; y increases downward.
    """

    name: KeypointName
    x: float
    y: float
    confidence: float


@dataclass(frozen=True, slots=True)
class PoseData:
    """Landmarks extracted from one analyzed frame.

    Attributes:
        hip_y: Fused hip center Y position in pixels
        confidence: Fused hip confidence [0, 1]
        body_height: Nose to ankle-midpoint span in pixels, if both were confident
    """

    hip_y: float
    confidence: float
    body_height: float | None = None


@dataclass(frozen=True, slots=True)
class HipObservation:
    """Hip position at one sampled instant."""

    time: float
    hip_y: float
    confidence: float


@dataclass(frozen=True, slots=True)
class JumpMeasurement:
    """Final jump height estimate.

    Attributes:
        height_cm: Jump height in centimeters
        air_time_s: Takeoff-to-peak time, only set by the manual estimator
    """

    height_cm: float
    air_time_s: float | None = None

    @property
    def height_in(self) -> float:
        """Jump height in inches."""
        return self.height_cm / 2.54

    @property
    def rounded_cm(self) -> int:
        """Jump height rounded half-up to the nearest centimeter for display."""
        return int(math.floor(self.height_cm + 0.5))


@dataclass(slots=True)
class Frame:
    """A decoded video frame with metadata.

    Attributes:
        image: BGR image array (OpenCV format)
        timestamp: Frame timestamp in seconds
        index: Sample sequence number
    """

    image: NDArray[np.uint8]
    timestamp: float
    index: int

    @property
    def width(self) -> int:
        """Frame width in pixels."""
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        """Frame height in pixels."""
        return int(self.image.shape[0])


@dataclass(frozen=True, slots=True)
class VideoInfo:
    """Static properties of a video source."""

    duration_s: float
    width: int
    height: int
    fps: float


class FrameSource(Protocol):
    """A seekable source of decoded video frames."""

    @property
    def info(self) -> VideoInfo: ...

    def seek(self, time_s: float, timeout: float) -> Frame | None:
        """Return the frame nearest ``time_s``.

        Waits at most ``timeout`` seconds and falls back to the current
        frame when the seek has not settled. Returns None when no frame
        has been decoded yet.
        """
        ...


class KeypointDetector(Protocol):
    """A per-frame body keypoint detector."""

    def load(self) -> None:
        """Load the model. Calling it again is a no-op."""
        ...

    def estimate(self, frame: Frame) -> list[Keypoint]:
        """Detect keypoints for the most prominent person in the frame."""
        ...
