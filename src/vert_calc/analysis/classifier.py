"""Jump height performance categories."""

from __future__ import annotations

import math
from enum import Enum


class JumpCategory(Enum):
    """Performance tier for a jump height.

    Each member carries its key, display label, inclusive lower bound in
    centimeters, and a short description of the level.
    """

    BEGINNER = (
        "beginner",
        "Beginner",
        0.0,
        "You're just getting started! Keep practicing and you'll improve quickly.",
    )
    AVERAGE = (
        "average",
        "Average",
        30.0,
        "That's about average for the general population. Room to grow!",
    )
    GOOD = (
        "good",
        "Good",
        46.0,
        "Nice jump! You're above average, like a recreational athlete.",
    )
    GREAT = (
        "great",
        "Great",
        56.0,
        "Impressive! That's competitive athlete territory.",
    )
    EXCELLENT = (
        "excellent",
        "Excellent",
        66.0,
        "Outstanding! You have high-level athletic ability.",
    )
    ELITE = (
        "elite",
        "Elite",
        76.0,
        "Incredible! That's professional athlete level explosiveness!",
    )

    def __init__(self, key: str, label: str, lower_cm: float, context: str) -> None:
        self.key = key
        self.label = label
        self.lower_cm = lower_cm
        self.context = context


def classify(height_cm: float) -> JumpCategory:
    """Map a jump height to its performance category.

    Ranges are half-open on the right; anything below the first bound is
    Beginner and anything from 76 cm up is Elite.

    Args:
        height_cm: Jump height in centimeters

    Returns:
        Matching JumpCategory

    Raises:
        ValueError: If height is NaN
    """
    if math.isnan(height_cm):
        raise ValueError("Cannot classify a NaN height")

    category = JumpCategory.BEGINNER
    for candidate in JumpCategory:
        if height_cm >= candidate.lower_cm:
            category = candidate
    return category
