"""Video input: seekable frame sources."""

from vert_calc.video.source import VideoFileSource

__all__ = ["VideoFileSource"]
