"""Vert Calc - vertical jump height estimation from video."""

__version__ = "0.1.0"
