"""Seekable video frame source backed by OpenCV."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

import cv2
import numpy as np
from numpy.typing import NDArray

from vert_calc.core.exceptions import VideoSourceError
from vert_calc.core.logging import get_logger
from vert_calc.core.types import Frame, VideoInfo

logger = get_logger(__name__)


class VideoFileSource:
    """Seekable frame source for a video file.

    Decoding happens on a single worker thread so that a slow seek can be
    abandoned after a timeout; the most recently decoded frame is returned
    in that case. At most one decode runs at a time: a seek issued while an
    abandoned decode is still running gets the current frame and is not
    queued, so the latest requested time always wins.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize source for a video file.

        Args:
            path: Path to the video file
        """
        self.path = Path(path)
        self._capture: cv2.VideoCapture | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._pending: Future[NDArray[np.uint8] | None] | None = None
        self._info: VideoInfo | None = None
        self._current: NDArray[np.uint8] | None = None
        self._current_lock = threading.Lock()
        self._frame_idx = 0

    @property
    def is_open(self) -> bool:
        """Check if the video is open."""
        return self._capture is not None

    @property
    def info(self) -> VideoInfo:
        """Duration, dimensions, and frame rate of the video.

        Raises:
            VideoSourceError: If the video is not open
        """
        if self._info is None:
            raise VideoSourceError("Video not open")
        return self._info

    def open(self) -> None:
        """Open the video and read its properties.

        Raises:
            VideoSourceError: If the file cannot be opened or has no usable frames
        """
        if self._capture is not None:
            return

        capture = cv2.VideoCapture(str(self.path))
        if not capture.isOpened():
            raise VideoSourceError(f"Could not open video: {self.path}")

        fps = float(capture.get(cv2.CAP_PROP_FPS) or 0.0)
        frame_count = int(capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)

        if fps <= 0 or frame_count <= 0 or height <= 0:
            capture.release()
            raise VideoSourceError(f"Video has no readable frames: {self.path}")

        self._capture = capture
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="video-decode")
        self._info = VideoInfo(
            duration_s=frame_count / fps,
            width=width,
            height=height,
            fps=fps,
        )
        self._pending = None
        self._current = None
        self._frame_idx = 0

        logger.info(
            "Opened %s (%dx%d, %.2f fps, %.2fs)",
            self.path.name,
            width,
            height,
            fps,
            self._info.duration_s,
        )

    def close(self) -> None:
        """Release the decoder."""
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
            self._pending = None

        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.debug("Closed %s after %d seeks", self.path.name, self._frame_idx)

    def _decode_at(self, time_s: float) -> NDArray[np.uint8] | None:
        """Seek and decode the frame nearest ``time_s`` (worker thread)."""
        if self._capture is None:
            return None

        self._capture.set(cv2.CAP_PROP_POS_MSEC, time_s * 1000.0)
        ok, image = self._capture.read()
        if not ok or image is None:
            return None

        decoded = np.asarray(image, dtype=np.uint8)
        with self._current_lock:
            self._current = decoded
        return decoded

    def seek(self, time_s: float, timeout: float = 0.5) -> Frame | None:
        """Return the frame nearest ``time_s``.

        Args:
            time_s: Target time in seconds
            timeout: Maximum seconds to wait for the seek to settle

        Returns:
            Decoded frame, the current frame if the seek timed out or failed,
            or None if nothing has been decoded yet

        Raises:
            VideoSourceError: If the video is not open or decoding raised
        """
        if self._executor is None:
            raise VideoSourceError("Video not open")

        image: NDArray[np.uint8] | None = None
        if self._pending is not None and not self._pending.done():
            # At most one decode in flight; stale seeks are never queued
            logger.debug("Decode still running, using current frame for %.3fs", time_s)
        else:
            future = self._executor.submit(self._decode_at, time_s)
            self._pending = future
            try:
                image = future.result(timeout=timeout)
            except FutureTimeoutError:
                logger.debug("Seek to %.3fs timed out, using current frame", time_s)
            except cv2.error as e:
                raise VideoSourceError(f"Failed to decode frame at {time_s:.3f}s: {e}") from e

        if image is None:
            with self._current_lock:
                image = self._current
            if image is None:
                return None

        frame = Frame(image=image, timestamp=time_s, index=self._frame_idx)
        self._frame_idx += 1
        return frame

    def __enter__(self) -> VideoFileSource:
        """Context manager entry."""
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()
