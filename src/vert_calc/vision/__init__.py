"""Computer vision operations: pose keypoint detection."""

from vert_calc.vision.pose import PoseEstimator, get_shared_estimator

__all__ = ["PoseEstimator", "get_shared_estimator"]
