"""Core infrastructure: config, types, exceptions, and logging."""

from vert_calc.core.config import Settings, get_settings
from vert_calc.core.exceptions import (
    AnalysisCancelledError,
    AnalysisInProgressError,
    DetectorUnavailableError,
    InsufficientPoseDataError,
    InvalidMarkOrderError,
    JumpTooSmallError,
    LowConfidenceError,
    VertCalcError,
    VideoSourceError,
)
from vert_calc.core.logging import get_logger, setup_logging
from vert_calc.core.types import (
    Frame,
    FrameSource,
    HipObservation,
    JumpMeasurement,
    Keypoint,
    KeypointDetector,
    KeypointName,
    MarkRole,
    PoseData,
    TimeMark,
    VideoInfo,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "MarkRole",
    "TimeMark",
    "KeypointName",
    "Keypoint",
    "PoseData",
    "HipObservation",
    "JumpMeasurement",
    "Frame",
    "VideoInfo",
    "FrameSource",
    "KeypointDetector",
    # Exceptions
    "VertCalcError",
    "InvalidMarkOrderError",
    "InsufficientPoseDataError",
    "LowConfidenceError",
    "JumpTooSmallError",
    "DetectorUnavailableError",
    "VideoSourceError",
    "AnalysisCancelledError",
    "AnalysisInProgressError",
    # Logging
    "setup_logging",
    "get_logger",
]
