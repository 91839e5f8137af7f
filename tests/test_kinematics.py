"""Tests for the manual kinematic estimator."""

from __future__ import annotations

import pytest

from vert_calc.analysis.kinematics import (
    GRAVITY,
    MarkSession,
    estimate_from_marks,
    height_from_air_time,
)
from vert_calc.core.config import ManualSettings
from vert_calc.core.exceptions import InvalidMarkOrderError
from vert_calc.core.types import JumpMeasurement, MarkRole, TimeMark


def _marks(takeoff: float, peak: float) -> tuple[TimeMark, TimeMark]:
    return TimeMark(takeoff, MarkRole.TAKEOFF), TimeMark(peak, MarkRole.PEAK)


class TestHeightFromAirTime:
    """Tests for the free-fall formula."""

    @pytest.mark.parametrize(
        ("air_time", "expected_cm"),
        [(0.3, 44.145), (0.4, 78.48), (0.5, 122.625)],
    )
    def test_matches_free_fall(self, air_time: float, expected_cm: float) -> None:
        """Height should be 490.5 * t^2 centimeters."""
        assert height_from_air_time(air_time) == pytest.approx(expected_cm)
        assert height_from_air_time(air_time) == pytest.approx(490.5 * air_time**2)

    def test_no_upper_clamp(self) -> None:
        """Long air times are not clamped."""
        assert height_from_air_time(2.0) == pytest.approx(1962.0)

    @pytest.mark.parametrize("air_time", [0.0, -0.1])
    def test_non_positive_air_time_raises(self, air_time: float) -> None:
        """Zero or negative air time is an ordering error."""
        with pytest.raises(InvalidMarkOrderError):
            height_from_air_time(air_time)

    def test_uses_standard_gravity(self) -> None:
        """Default gravity is 9.81 m/s^2."""
        assert GRAVITY == 9.81


class TestEstimateFromMarks:
    """Tests for mark-pair estimation."""

    def test_returns_height_and_air_time(self) -> None:
        """Measurement carries both height and air time."""
        takeoff, peak = _marks(1.0, 1.3)

        measurement = estimate_from_marks(takeoff, peak)

        assert measurement.air_time_s == pytest.approx(0.3)
        assert measurement.height_cm == pytest.approx(44.145)

    @pytest.mark.parametrize(("takeoff", "peak"), [(1.3, 1.0), (1.0, 1.0)])
    def test_peak_not_after_takeoff_raises(self, takeoff: float, peak: float) -> None:
        """Peak at or before takeoff never yields a number."""
        with pytest.raises(InvalidMarkOrderError) as exc_info:
            estimate_from_marks(*_marks(takeoff, peak))

        assert exc_info.value.code == "INVALID_MARK_ORDER"

    def test_swapped_roles_raise(self) -> None:
        """Marks must be passed as (takeoff, peak)."""
        takeoff, peak = _marks(1.0, 1.3)
        with pytest.raises(ValueError):
            estimate_from_marks(peak, takeoff)

    def test_is_deterministic(self) -> None:
        """Identical marks give bit-identical results."""
        takeoff, peak = _marks(0.734, 1.071)

        first = estimate_from_marks(takeoff, peak)
        second = estimate_from_marks(takeoff, peak)

        assert first == second
        assert first.height_cm == second.height_cm


class TestTimeMark:
    """Tests for TimeMark validation."""

    def test_negative_time_rejected(self) -> None:
        """Mark times cannot be negative."""
        with pytest.raises(ValueError):
            TimeMark(-0.1, MarkRole.TAKEOFF)

    def test_is_immutable(self) -> None:
        """Marks cannot be changed after creation."""
        mark = TimeMark(0.5, MarkRole.PEAK)
        with pytest.raises(AttributeError):
            mark.time = 1.0  # type: ignore[misc]


class TestJumpMeasurement:
    """Tests for measurement display values."""

    @pytest.mark.parametrize(
        ("height_cm", "expected"),
        [(20.5, 21), (44.5, 45), (44.145, 44), (20.4, 20), (0.5, 1)],
    )
    def test_rounded_cm_rounds_half_up(self, height_cm: float, expected: int) -> None:
        """Halves round up, never to even."""
        assert JumpMeasurement(height_cm=height_cm).rounded_cm == expected

    def test_height_in(self) -> None:
        """Inches use 2.54 cm per inch."""
        assert JumpMeasurement(height_cm=50.8).height_in == pytest.approx(20.0)


class TestMarkSession:
    """Tests for the marking workflow."""

    def test_initial_state(self, manual_settings: ManualSettings) -> None:
        """A new session has no marks and cannot calculate."""
        session = MarkSession(manual_settings)

        assert session.takeoff is None
        assert session.peak is None
        assert session.air_time is None
        assert not session.can_calculate
        assert "Mark Takeoff" in session.instruction

    def test_instruction_progression(self, manual_settings: ManualSettings) -> None:
        """Instruction follows the marking steps."""
        session = MarkSession(manual_settings)

        session.mark_takeoff(1.0)
        assert "Mark Peak" in session.instruction

        session.mark_peak(1.25)
        assert session.instruction == "Ready to calculate! Air time to peak: 0.250s"
        assert session.can_calculate

    def test_misordered_marks_warn(self, manual_settings: ManualSettings) -> None:
        """Peak before takeoff is reported and blocks calculation."""
        session = MarkSession(manual_settings)
        session.mark_takeoff(2.0)
        session.mark_peak(1.5)

        assert not session.can_calculate
        assert "Peak must be after takeoff" in session.instruction
        with pytest.raises(InvalidMarkOrderError):
            session.calculate()

    def test_remark_replaces_previous(self, manual_settings: ManualSettings) -> None:
        """Marking again replaces the earlier mark."""
        session = MarkSession(manual_settings)
        session.mark_takeoff(1.0)
        session.mark_takeoff(1.1)
        session.mark_peak(1.5)

        assert session.takeoff == TimeMark(1.1, MarkRole.TAKEOFF)
        assert session.air_time == pytest.approx(0.4)
        assert session.calculate().height_cm == pytest.approx(78.48)

    def test_calculate_requires_both_marks(self, manual_settings: ManualSettings) -> None:
        """Calculating with a missing mark fails."""
        session = MarkSession(manual_settings)
        session.mark_takeoff(1.0)

        with pytest.raises(InvalidMarkOrderError):
            session.calculate()

    def test_reset_discards_marks(self, manual_settings: ManualSettings) -> None:
        """Reset clears both marks."""
        session = MarkSession(manual_settings)
        session.mark_takeoff(1.0)
        session.mark_peak(1.3)

        session.reset()

        assert session.takeoff is None
        assert session.peak is None
        assert not session.can_calculate

    def test_step_moves_one_frame(self, manual_settings: ManualSettings) -> None:
        """Stepping moves by the configured frame step."""
        session = MarkSession(manual_settings)

        assert session.step(1.0, 1, 5.0) == pytest.approx(1.0 + 1 / 30)
        assert session.step(1.0, -1, 5.0) == pytest.approx(1.0 - 1 / 30)

    def test_step_clamps_to_video(self, manual_settings: ManualSettings) -> None:
        """Stepping never leaves [0, duration]."""
        session = MarkSession(manual_settings)

        assert session.step(0.0, -1, 5.0) == 0.0
        assert session.step(5.0, 1, 5.0) == 5.0

    def test_custom_gravity(self) -> None:
        """Gravity comes from settings."""
        session = MarkSession(ManualSettings(gravity=1.62))
        session.mark_takeoff(0.0)
        session.mark_peak(1.0)

        assert session.calculate().height_cm == pytest.approx(81.0)
