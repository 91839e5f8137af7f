"""Custom exceptions for Vert Calc.

Every failure of a measurement attempt is terminal for that attempt and
carries a stable ``code`` alongside the human-readable message.
"""


class VertCalcError(Exception):
    """Base exception for all Vert Calc errors."""

    code = "VERT_CALC_ERROR"

    def __init__(self, message: str = "Jump measurement failed") -> None:
        self.message = message
        super().__init__(self.message)


class InvalidMarkOrderError(VertCalcError):
    """Peak mark is not after the takeoff mark."""

    code = "INVALID_MARK_ORDER"

    def __init__(self, message: str = "Peak must be after takeoff") -> None:
        super().__init__(message)


class InsufficientPoseDataError(VertCalcError):
    """Too few hip observations were detected across the video."""

    code = "INSUFFICIENT_POSE_DATA"

    def __init__(
        self,
        message: str = "Not enough pose data detected. Please ensure your full body is visible.",
    ) -> None:
        super().__init__(message)


class LowConfidenceError(VertCalcError):
    """Too few hip observations survived the confidence filter."""

    code = "LOW_CONFIDENCE"

    def __init__(
        self,
        message: str = "Pose detection confidence too low. Please try better lighting.",
    ) -> None:
        super().__init__(message)


class JumpTooSmallError(VertCalcError):
    """Computed height is below the measurable floor."""

    code = "JUMP_TOO_SMALL"

    def __init__(
        self,
        message: str = "Jump was too small to measure accurately. Try jumping higher.",
    ) -> None:
        super().__init__(message)


class DetectorUnavailableError(VertCalcError):
    """Keypoint detector failed to load or failed during inference."""

    code = "DETECTOR_UNAVAILABLE"

    def __init__(self, message: str = "Pose detector unavailable") -> None:
        super().__init__(message)


class VideoSourceError(VertCalcError):
    """Video could not be opened or decoded."""

    code = "VIDEO_SOURCE_ERROR"

    def __init__(self, message: str = "Video source error") -> None:
        super().__init__(message)


class AnalysisCancelledError(VertCalcError):
    """Analysis was cancelled by the caller between frames."""

    code = "ANALYSIS_CANCELLED"

    def __init__(self, message: str = "Analysis cancelled") -> None:
        super().__init__(message)


class AnalysisInProgressError(VertCalcError):
    """Another analysis is already running on the same video source."""

    code = "ANALYSIS_IN_PROGRESS"

    def __init__(self, message: str = "An analysis is already running on this video") -> None:
        super().__init__(message)
