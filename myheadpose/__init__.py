# myheadpose/__init__.py

from .head_pose_estimation import HeadPoseEstimation, PoseResult
from .config import Config, DLIB_68_LANDMARKS_URL
from .camera import CameraModel, OpticalCenterState
from .detectors import LandmarkDetector, DlibLandmarkDetector, FaceLandmarks
from .pose_estimator import HeadPoseEstimator, REFERENCE_HEAD_MODEL
from .landmarks import FacialFeature
from .hooks import Hooks
from .geometry import line_intersection
from .rendering import draw_detections
from .exceptions import (
    HeadPoseError,
    ConfigurationError,
    InputError,
    DetectionError,
    PoseEstimationError,
    CameraNotInitializedError,
)

__all__ = [
    "HeadPoseEstimation",
    "PoseResult",
    "Config",
    "DLIB_68_LANDMARKS_URL",
    "CameraModel",
    "OpticalCenterState",
    "LandmarkDetector",
    "DlibLandmarkDetector",
    "FaceLandmarks",
    "HeadPoseEstimator",
    "REFERENCE_HEAD_MODEL",
    "FacialFeature",
    "Hooks",
    "line_intersection",
    "draw_detections",
    "HeadPoseError",
    "ConfigurationError",
    "InputError",
    "DetectionError",
    "PoseEstimationError",
    "CameraNotInitializedError",
]
