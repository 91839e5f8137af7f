"""Tests for the OpenCV video frame source."""

from __future__ import annotations

import time
from pathlib import Path

import cv2
import numpy as np
import pytest

from vert_calc.core.exceptions import VideoSourceError
from vert_calc.video.source import VideoFileSource

FPS = 30.0
WIDTH = 64
HEIGHT = 48
FRAME_COUNT = 30


@pytest.fixture
def video_path(tmp_path: Path) -> Path:
    """Write a one-second MJPEG clip whose brightness rises each frame."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), FPS, (WIDTH, HEIGHT))
    if not writer.isOpened():
        pytest.skip("MJPG encoder unavailable")

    for i in range(FRAME_COUNT):
        writer.write(np.full((HEIGHT, WIDTH, 3), i * 8, dtype=np.uint8))
    writer.release()

    return path


class TestVideoFileSource:
    """Tests for the VideoFileSource class."""

    def test_reads_video_info(self, video_path: Path) -> None:
        """Duration and dimensions come from the container."""
        with VideoFileSource(video_path) as source:
            info = source.info

        assert info.width == WIDTH
        assert info.height == HEIGHT
        assert info.fps == pytest.approx(FPS)
        assert info.duration_s == pytest.approx(FRAME_COUNT / FPS, abs=0.1)

    def test_seek_returns_frame(self, video_path: Path) -> None:
        """Seeking decodes a frame at the requested time."""
        with VideoFileSource(video_path) as source:
            frame = source.seek(0.5, timeout=5.0)

        assert frame is not None
        assert frame.image.shape == (HEIGHT, WIDTH, 3)
        assert frame.timestamp == 0.5

    def test_later_seek_shows_later_frame(self, video_path: Path) -> None:
        """Frames later in the clip are brighter."""
        with VideoFileSource(video_path) as source:
            early = source.seek(0.1, timeout=5.0)
            late = source.seek(0.8, timeout=5.0)

        assert early is not None and late is not None
        assert late.image.mean() > early.image.mean()

    def test_seek_past_end_keeps_current_frame(self, video_path: Path) -> None:
        """A seek that decodes nothing falls back to the last frame."""
        with VideoFileSource(video_path) as source:
            first = source.seek(0.2, timeout=5.0)
            beyond = source.seek(10.0, timeout=5.0)

        assert first is not None and beyond is not None
        assert np.array_equal(beyond.image, first.image)

    def test_slow_seek_falls_back_to_current_frame(
        self, video_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A seek that exceeds the timeout returns the current frame."""
        with VideoFileSource(video_path) as source:
            first = source.seek(0.2, timeout=5.0)
            assert first is not None

            def slow_decode(time_s: float) -> None:
                time.sleep(0.3)

            monkeypatch.setattr(source, "_decode_at", slow_decode)

            started = time.monotonic()
            frame = source.seek(0.6, timeout=0.05)
            elapsed = time.monotonic() - started

        assert frame is not None
        assert np.array_equal(frame.image, first.image)
        assert frame.timestamp == 0.6
        assert elapsed < 0.25

    def test_slow_first_seek_returns_none(
        self, video_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """With nothing decoded yet a timed-out seek has no frame."""
        with VideoFileSource(video_path) as source:

            def slow_decode(time_s: float) -> None:
                time.sleep(0.2)

            monkeypatch.setattr(source, "_decode_at", slow_decode)

            assert source.seek(0.0, timeout=0.02) is None

    def test_timed_out_seeks_do_not_queue(
        self, video_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Seeks issued during a slow decode are not queued behind it."""
        source = VideoFileSource(video_path)
        source.open()
        decoded_times: list[float] = []

        def slow_decode(time_s: float) -> None:
            decoded_times.append(time_s)
            time.sleep(0.1)

        monkeypatch.setattr(source, "_decode_at", slow_decode)

        for i in range(15):
            source.seek(i / 15, timeout=0.01)

        started = time.monotonic()
        source.close()
        elapsed = time.monotonic() - started

        assert elapsed < 0.3
        assert len(decoded_times) < 15
        assert decoded_times[0] == 0.0

    def test_seek_after_slow_decode_uses_new_time(
        self, video_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Once the slow decode finishes the next seek decodes again."""
        with VideoFileSource(video_path) as source:
            decoded_times: list[float] = []

            def slow_decode(time_s: float) -> None:
                decoded_times.append(time_s)
                time.sleep(0.05)

            monkeypatch.setattr(source, "_decode_at", slow_decode)

            source.seek(0.1, timeout=0.01)
            source.seek(0.2, timeout=0.01)
            time.sleep(0.15)
            source.seek(0.3, timeout=1.0)

        assert decoded_times == [0.1, 0.3]

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Unopenable files raise VideoSourceError."""
        source = VideoFileSource(tmp_path / "missing.mp4")

        with pytest.raises(VideoSourceError):
            source.open()

        assert not source.is_open

    def test_seek_before_open_raises(self, video_path: Path) -> None:
        """The source must be opened first."""
        source = VideoFileSource(video_path)

        with pytest.raises(VideoSourceError):
            source.seek(0.0, timeout=0.5)

        with pytest.raises(VideoSourceError):
            _ = source.info

    def test_close_releases(self, video_path: Path) -> None:
        """Closing releases the decoder."""
        source = VideoFileSource(video_path)
        source.open()
        assert source.is_open

        source.close()

        assert not source.is_open
