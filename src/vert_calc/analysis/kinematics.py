"""Manual jump estimation from marked takeoff and peak times.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

from vert_calc.core.config import ManualSettings
from vert_calc.core.exceptions import InvalidMarkOrderError
from vert_calc.core.types import JumpMeasurement, MarkRole, TimeMark

GRAVITY = 9.81  # m/s^2


def height_from_air_time(air_time_s: float, gravity: float = GRAVITY) -> float:
    """Convert takeoff-to-apex time into jump height.

    Uses the free-fall relation h = 1/2 * g * t^2. No clamping is applied.

    Args:
        air_time_s: Time from takeoff to peak in seconds
        gravity: Gravitational acceleration in m/s^2

    Returns:
        Jump height in centimeters

    Raises:
        InvalidMarkOrderError: If air time is not positive
    """
    if not air_time_s > 0:
        raise InvalidMarkOrderError(
            f"Peak must be after takeoff (air time {air_time_s:.3f}s)"
        )

    height_m = 0.5 * gravity * air_time_s**2
    return height_m * 100


def estimate_from_marks(
    takeoff: TimeMark,
    peak: TimeMark,
    gravity: float = GRAVITY,
) -> JumpMeasurement:
    """Estimate jump height from a takeoff/peak mark pair.

    Args:
        takeoff: Instant the feet leave the ground
        peak: Instant of the highest point
        gravity: Gravitational acceleration in m/s^2

    Returns:
        JumpMeasurement with height and air time

    Raises:
        ValueError: If the marks carry the wrong roles
        InvalidMarkOrderError: If peak is not after takeoff
    """
    if takeoff.role is not MarkRole.TAKEOFF or peak.role is not MarkRole.PEAK:
        raise ValueError("Expected a takeoff mark followed by a peak mark")

    air_time = peak.time - takeoff.time
    height_cm = height_from_air_time(air_time, gravity)

    return JumpMeasurement(height_cm=height_cm, air_time_s=air_time)


class MarkSession:
    """Takeoff and peak marks placed on a single video.

    Marks are immutable; marking again replaces the previous one.
    """

    def __init__(self, settings: ManualSettings | None = None) -> None:
        """Initialize an empty session.

        Args:
            settings: Manual estimator settings (uses defaults if None)
        """
        self.settings = settings or ManualSettings()
        self._takeoff: TimeMark | None = None
        self._peak: TimeMark | None = None

    @property
    def takeoff(self) -> TimeMark | None:
        """Current takeoff mark."""
        return self._takeoff

    @property
    def peak(self) -> TimeMark | None:
        """Current peak mark."""
        return self._peak

    @property
    def air_time(self) -> float | None:
        """Peak minus takeoff time, once both marks are set."""
        if self._takeoff is None or self._peak is None:
            return None
        return self._peak.time - self._takeoff.time

    @property
    def can_calculate(self) -> bool:
        """Whether both marks are set and correctly ordered."""
        air_time = self.air_time
        return air_time is not None and air_time > 0

    @property
    def instruction(self) -> str:
        """Prompt describing the next step for the user."""
        if self._takeoff is None:
            return (
                "Scrub to the frame where your heels leave the ground, "
                'then tap "Mark Takeoff"'
            )
        if self._peak is None:
            return 'Now scrub to the highest point of your jump, then tap "Mark Peak"'

        air_time = self._peak.time - self._takeoff.time
        if air_time <= 0:
            return "Peak must be after takeoff. Please re-mark the frames."
        return f"Ready to calculate! Air time to peak: {air_time:.3f}s"

    def mark_takeoff(self, time_s: float) -> TimeMark:
        """Mark the takeoff instant."""
        self._takeoff = TimeMark(time=time_s, role=MarkRole.TAKEOFF)
        return self._takeoff

    def mark_peak(self, time_s: float) -> TimeMark:
        """Mark the peak instant."""
        self._peak = TimeMark(time=time_s, role=MarkRole.PEAK)
        return self._peak

    def step(self, current_time: float, direction: int, duration: float) -> float:
        """Move one frame step forward or backward.

        Args:
            current_time: Current playback position in seconds
            direction: +1 to step forward, -1 to step back
            duration: Video duration in seconds

        Returns:
            New playback position clamped to [0, duration]
        """
        new_time = current_time + direction * self.settings.frame_step_s
        return max(0.0, min(new_time, duration))

    def calculate(self) -> JumpMeasurement:
        """Estimate height from the current marks.

        Raises:
            InvalidMarkOrderError: If a mark is missing or peak is not after takeoff
        """
        if self._takeoff is None or self._peak is None:
            raise InvalidMarkOrderError("Both takeoff and peak must be marked")

        return estimate_from_marks(self._takeoff, self._peak, self.settings.gravity)

    def reset(self) -> None:
        """Discard both marks."""
        self._takeoff = None
        self._peak = None
