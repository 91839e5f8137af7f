"""Application configuration via Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PoseSettings(BaseSettings):
    """MediaPipe pose landmarker settings."""

    model_config = SettingsConfigDict(env_prefix="POSE_")

    model_variant: Literal["lite", "full", "heavy"] = "lite"
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    model_dir: Path = Path.home() / ".cache" / "vert_calc" / "models"


class SamplingSettings(BaseSettings):
    """Frame sampling for vision analysis."""

    model_config = SettingsConfigDict(env_prefix="SAMPLING_")

    sample_rate_hz: float = Field(default=15.0, gt=0)
    seek_timeout_s: float = Field(default=0.5, gt=0)


class EstimatorSettings(BaseSettings):
    """Thresholds and ratios for the vision height estimator.

    Attributes:
        keypoint_confidence: Minimum keypoint score to use a landmark at all
        filter_confidence: Stricter hip score required for the height calculation
        min_observations: Required hip observations, both raw and filtered
        min_calibration_samples: Body-height samples needed to calibrate from the body
        body_span_ratio: Fraction of standing height spanned by nose-to-ankle
        frame_fill_ratio: Fraction of the frame a standing person is assumed to fill
        baseline_window_s: Leading window the subject is assumed to stand still
        min_baseline_samples: Observations in the window needed to average a baseline
        artifact_threshold_cm: Heights above this are halved as detection artifacts
        min_height_cm: Heights below this are rejected as noise
    """

    model_config = SettingsConfigDict(env_prefix="ESTIMATOR_")

    keypoint_confidence: float = 0.3
    filter_confidence: float = 0.4
    min_observations: int = 5
    min_calibration_samples: int = 3
    body_span_ratio: float = 0.9
    frame_fill_ratio: float = 0.7
    baseline_window_s: float = 1.0
    min_baseline_samples: int = 2
    artifact_threshold_cm: float = 120.0
    min_height_cm: float = 5.0


class ManualSettings(BaseSettings):
    """Manual frame-marking estimator settings."""

    model_config = SettingsConfigDict(env_prefix="MANUAL_")

    gravity: float = 9.81
    frame_step_s: float = 1 / 30


class UserSettings(BaseSettings):
    """Plausible range for the user's height calibration input."""

    model_config = SettingsConfigDict(env_prefix="USER_")

    min_height_cm: float = 76.0
    max_height_cm: float = 250.0


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    file: str | None = None


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    pose: PoseSettings = Field(default_factory=PoseSettings)
    sampling: SamplingSettings = Field(default_factory=SamplingSettings)
    estimator: EstimatorSettings = Field(default_factory=EstimatorSettings)
    manual: ManualSettings = Field(default_factory=ManualSettings)
    user: UserSettings = Field(default_factory=UserSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings instance."""
    return Settings()
