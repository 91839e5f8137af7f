"""Pure analysis logic: manual estimation, height calculation, and classification.

This module contains NO I/O operations and NO OpenCV imports.
All functions operate on typed dataclasses and return results.
"""

from vert_calc.analysis.calculator import HeightCalculator, extract_pose_data
from vert_calc.analysis.classifier import JumpCategory, classify
from vert_calc.analysis.kinematics import MarkSession, estimate_from_marks, height_from_air_time

__all__ = [
    "HeightCalculator",
    "extract_pose_data",
    "JumpCategory",
    "classify",
    "MarkSession",
    "estimate_from_marks",
    "height_from_air_time",
]
