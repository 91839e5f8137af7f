"""MediaPipe pose keypoint detector using the Tasks API."""

from __future__ import annotations

import threading
import urllib.request
from functools import lru_cache
from pathlib import Path

import cv2
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from vert_calc.core.config import PoseSettings, get_settings
from vert_calc.core.exceptions import DetectorUnavailableError
from vert_calc.core.logging import get_logger
from vert_calc.core.types import Frame, Keypoint, KeypointName

logger = get_logger(__name__)

MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/pose_landmarker/"
    "pose_landmarker_{variant}/float16/latest/pose_landmarker_{variant}.task"
)

# Landmark order of the MediaPipe pose model (33 landmarks)
MEDIAPIPE_LANDMARKS: tuple[KeypointName, ...] = tuple(KeypointName)


def _download_model(settings: PoseSettings) -> Path:
    """Download the pose landmarker model if not present.

    Returns:
        Path to the model file

    Raises:
        DetectorUnavailableError: If download fails
    """
    model_path = settings.model_dir / f"pose_landmarker_{settings.model_variant}.task"
    if model_path.exists():
        return model_path

    url = MODEL_URL.format(variant=settings.model_variant)
    logger.info("Downloading MediaPipe pose landmarker model (%s)...", settings.model_variant)
    settings.model_dir.mkdir(parents=True, exist_ok=True)

    # Partial downloads never land at model_path
    part_path = model_path.with_suffix(".part")
    try:
        urllib.request.urlretrieve(url, part_path)
        part_path.replace(model_path)
    except Exception as e:
        part_path.unlink(missing_ok=True)
        raise DetectorUnavailableError(f"Failed to download model: {e}") from e

    logger.info("Model downloaded to %s", model_path)
    return model_path


class PoseEstimator:
    """Keypoint detector backed by MediaPipe's PoseLandmarker.

    Runs in IMAGE mode so calls are independent of each other and one
    instance can be reused across videos. Converts MediaPipe results to
    Keypoint objects in pixel coordinates to avoid leaking MediaPipe types
    throughout the codebase.
    """

    def __init__(self, settings: PoseSettings | None = None) -> None:
        """Initialize pose estimator with settings.

        Args:
            settings: Pose estimation settings (uses defaults if None)
        """
        self.settings = settings or PoseSettings()
        self._landmarker: vision.PoseLandmarker | None = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        """Check if the MediaPipe model is loaded."""
        return self._landmarker is not None

    def load(self) -> None:
        """Load the MediaPipe pose model once.

        Raises:
            DetectorUnavailableError: If model fails to load
        """
        with self._lock:
            if self._landmarker is not None:
                return

            try:
                model_path = _download_model(self.settings)

                base_options = python.BaseOptions(model_asset_path=str(model_path))
                options = vision.PoseLandmarkerOptions(
                    base_options=base_options,
                    running_mode=vision.RunningMode.IMAGE,
                    num_poses=1,
                    min_pose_detection_confidence=self.settings.min_detection_confidence,
                    min_pose_presence_confidence=self.settings.min_presence_confidence,
                )

                self._landmarker = vision.PoseLandmarker.create_from_options(options)
                logger.info("MediaPipe PoseLandmarker loaded (%s)", self.settings.model_variant)

            except DetectorUnavailableError:
                raise
            except Exception as e:
                raise DetectorUnavailableError(f"Failed to load MediaPipe: {e}") from e

    def close(self) -> None:
        """Release MediaPipe resources."""
        with self._lock:
            if self._landmarker is not None:
                self._landmarker.close()
                self._landmarker = None

    def estimate(self, frame: Frame) -> list[Keypoint]:
        """Detect body keypoints in a frame.

        Args:
            frame: Input video frame

        Returns:
            Keypoints of the first detected person, empty if nobody was found

        Raises:
            DetectorUnavailableError: If the model cannot load or inference fails
        """
        self.load()

        with self._lock:
            if self._landmarker is None:
                raise DetectorUnavailableError("Pose estimator not loaded")

            try:
                rgb_image = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB)
                mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_image)
                results = self._landmarker.detect(mp_image)
            except Exception as e:
                logger.error("Pose estimation failed: %s", e)
                raise DetectorUnavailableError(f"Estimation failed: {e}") from e

        return self._convert_results(results, frame)

    def _convert_results(
        self, results: vision.PoseLandmarkerResult, frame: Frame
    ) -> list[Keypoint]:
        """Convert MediaPipe results to pixel-space keypoints.

        Args:
            results: MediaPipe pose landmarker results
            frame: Frame the results were computed on

        Returns:
            Keypoints of the first pose
        """
        if not results.pose_landmarks:
            return []

        keypoints: list[Keypoint] = []
        for name, lm in zip(MEDIAPIPE_LANDMARKS, results.pose_landmarks[0]):
            visibility = getattr(lm, "visibility", None)
            keypoints.append(
                Keypoint(
                    name=name,
                    x=float(lm.x) * frame.width,
                    y=float(lm.y) * frame.height,
                    confidence=float(visibility) if visibility is not None else 0.0,
                )
            )

        return keypoints

    def __enter__(self) -> PoseEstimator:
        """Context manager entry."""
        self.load()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()


@lru_cache(maxsize=1)
def get_shared_estimator() -> PoseEstimator:
    """Get the process-wide pose estimator.

    The model itself is loaded lazily on first use and kept for the
    lifetime of the process.
    """
    return PoseEstimator(get_settings().pose)
