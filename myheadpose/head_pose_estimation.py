# myheadpose/head_pose_estimation.py

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import cv2
import numpy as np
from PIL import Image

from .camera import CameraModel
from .config import Config
from .detectors import DlibLandmarkDetector, FaceLandmarks, LandmarkDetector
from .exceptions import ConfigurationError, DetectionError, InputError, PoseEstimationError
from .hooks import Hooks
from .landmarks import LANDMARK_COUNT
from .pose_estimator import HeadPoseEstimator
from .rendering import draw_detections

logger = logging.getLogger(__name__)


@dataclass
class PoseResult:
    face_index: int
    pose: Optional[np.ndarray] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _as_image(image) -> np.ndarray:
    if isinstance(image, Image.Image):
        rgb = np.asarray(image.convert("RGB"))
        image = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    if not isinstance(image, np.ndarray):
        raise InputError(f"Expected an image array, got {type(image).__name__}.")
    if image.ndim not in (2, 3) or image.size == 0:
        raise InputError(f"Expected a non-empty 2-D image, got array of shape {image.shape}.")
    return image


class HeadPoseEstimation:
    """
    Per-frame head pose estimation for every face in an image.

    Call `update` with a frame first; `pose`, `poses` and `pose_results` then
    work on the faces found in that frame. State is owned by the instance and
    is not thread-safe: serialize calls when sharing one estimator.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        detector: Optional[LandmarkDetector] = None,
        hooks: Optional[Hooks] = None,
        pose_estimator: Optional[HeadPoseEstimator] = None
    ):
        self.config = config or Config()
        self.hooks = hooks or Hooks()
        self.pose_estimator = pose_estimator or HeadPoseEstimator()
        self.camera = CameraModel.create(
            focal_length=self.config.focal_length,
            optical_center=self.config.optical_center
        )

        if detector is not None:
            self.detector = detector
        elif self.config.landmark_model_path:
            self.detector = DlibLandmarkDetector(
                self.config.landmark_model_path,
                upsample=self.config.upsample
            )
        else:
            raise ConfigurationError("No landmark detector given and no landmark_model_path configured.")

        self._image: Optional[np.ndarray] = None
        self._faces: List[FaceLandmarks] = []
        self._landmarks: List[np.ndarray] = []

    @property
    def image(self) -> Optional[np.ndarray]:
        return self._image

    @property
    def faces(self) -> List[FaceLandmarks]:
        return list(self._faces)

    @property
    def landmarks(self) -> List[np.ndarray]:
        return [points.copy() for points in self._landmarks]

    def _landmarks_of(self, face_index: int) -> np.ndarray:
        if not 0 <= face_index < len(self._landmarks):
            raise IndexError(
                f"Face index {face_index} out of range ({len(self._landmarks)} face(s) in current frame)."
            )
        return self._landmarks[face_index]

    def update(self, image) -> List[np.ndarray]:
        """
        Detect faces and their 68 landmarks in `image`, replacing the previous frame's state.

        Args:
            image (np.ndarray or PIL.Image.Image): BGR (or grayscale) frame.

        Returns:
            List[np.ndarray]: one (68, 2) landmark array per face, in detection order.
        """
        image = self.hooks.execute_before_detect(_as_image(image))
        image = _as_image(image)

        detections = self.detector.detect(image)

        landmarks = []
        for idx, face in enumerate(detections):
            points = np.array(face.points, dtype=np.float64)
            if points.shape != (LANDMARK_COUNT, 2):
                raise DetectionError(
                    f"Face {idx}: expected {LANDMARK_COUNT} landmarks, detector returned shape {points.shape}."
                )
            landmarks.append(points)

        self.camera.initialize_from_image(image)
        self._image = image
        self._faces = list(detections)
        self._landmarks = landmarks
        logger.debug(f"Frame {image.shape[1]}x{image.shape[0]}: {len(landmarks)} face(s).")

        self.hooks.execute_after_detect(self.landmarks)
        return self.landmarks

    def pose(self, face_index: int) -> np.ndarray:
        """
        Head pose of face `face_index` from the last `update`.

        Returns:
            np.ndarray: 4x4 transform, rotation block and translation in meters.

        Raises:
            IndexError: no such face in the current frame.
            PoseEstimationError: the solve failed for this face.
        """
        pose = self.pose_estimator.estimate_pose(self._landmarks_of(face_index), self.camera)
        self.hooks.execute_after_pose(face_index, pose)
        return pose

    def pose_results(self) -> List[PoseResult]:
        """Solve every face independently; a failing face does not stop the others."""
        results = []
        for face_index in range(len(self._landmarks)):
            try:
                results.append(PoseResult(face_index, pose=self.pose(face_index)))
            except PoseEstimationError as e:
                logger.error(f"Pose estimation failed for face {face_index}: {e}")
                results.append(PoseResult(face_index, error=e))
        return results

    def poses(self) -> List[Optional[np.ndarray]]:
        """
        One pose per stored face, in detection order. A face whose solve
        failed is reported as None so indices stay aligned with `landmarks`.
        """
        return [result.pose for result in self.pose_results()]

    def reprojection_error(self, face_index: int, pose: Optional[np.ndarray] = None) -> float:
        """RMS pixel error of the fitted head model for face `face_index`."""
        if pose is None:
            pose = self.pose(face_index)
        return self.pose_estimator.reprojection_error(self._landmarks_of(face_index), pose, self.camera)

    def draw_detections(self, image: np.ndarray, landmark_sets: Sequence[np.ndarray],
                        poses: Sequence[Optional[np.ndarray]]) -> np.ndarray:
        return draw_detections(image, landmark_sets, poses, self.camera)
