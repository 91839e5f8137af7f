"""Pytest fixtures for Vert Calc tests."""

from __future__ import annotations

import pytest

from vert_calc.core.config import (
    EstimatorSettings,
    ManualSettings,
    SamplingSettings,
    Settings,
)
from vert_calc.core.types import HipObservation

from .fakes import FakeDetector, FakeFrameSource, jump_hip_y, make_body


@pytest.fixture
def estimator_settings() -> EstimatorSettings:
    """Create estimator settings with default thresholds."""
    return EstimatorSettings()


@pytest.fixture
def manual_settings() -> ManualSettings:
    """Create manual estimator settings."""
    return ManualSettings()


@pytest.fixture
def settings() -> Settings:
    """Create application settings sampling at 15 Hz."""
    return Settings(sampling=SamplingSettings(sample_rate_hz=15.0, seek_timeout_s=0.5))


@pytest.fixture
def jump_detector() -> FakeDetector:
    """Detector following a 100 px hip rise with an 810 px nose-to-ankle span."""
    return FakeDetector(lambda t: make_body(jump_hip_y(t)))


@pytest.fixture
def frame_source() -> FakeFrameSource:
    """Two-second, 1000 px tall video."""
    return FakeFrameSource(duration_s=2.0, height=1000)


@pytest.fixture
def jump_observations() -> list[HipObservation]:
    """Hip series standing at 500 px and peaking at 400 px."""
    times = [i / 15 for i in range(30)]
    return [HipObservation(time=t, hip_y=jump_hip_y(t), confidence=0.9) for t in times]
