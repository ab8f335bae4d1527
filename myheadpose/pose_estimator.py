# myheadpose/pose_estimator.py

import logging

import cv2
import numpy as np

from .camera import CameraModel
from .exceptions import PoseEstimationError
from .geometry import compose_pose, project_points, rotation_matrix_to_vector, rotation_vector_to_matrix, split_pose
from .landmarks import FacialFeature, as_landmark_set, coords_of, stomion

logger = logging.getLogger(__name__)

# Anthropometric reference points of a generic head, in millimeters.
# Origin at the sellion; x points forward, y to the subject's left, z up.
P3D_SELLION = (0., 0., 0.)
P3D_RIGHT_EYE = (-20., -65.5, -5.)
P3D_LEFT_EYE = (-20., 65.5, -5.)
P3D_RIGHT_EAR = (-100., -77.5, -6.)
P3D_LEFT_EAR = (-100., 77.5, -6.)
P3D_MENTON = (0., 0., -133.0)
P3D_NOSE = (21.0, 0., -48.0)
P3D_STOMION = (10.0, 0., -75.0)

REFERENCE_HEAD_MODEL = np.array([
    P3D_SELLION,
    P3D_RIGHT_EYE,
    P3D_LEFT_EYE,
    P3D_RIGHT_EAR,
    P3D_LEFT_EAR,
    P3D_MENTON,
    P3D_NOSE,
    P3D_STOMION,
], dtype=np.float64)
REFERENCE_HEAD_MODEL.setflags(write=False)

# Head roughly 1m away and facing the camera. Without this seed the iterative
# solver can settle on the mirror solution, with the head behind the camera.
# Tuned by hand; do not replace with zeros.
INITIAL_TRANSLATION_MM = np.array([[0.], [0.], [1000.]])
INITIAL_ROTATION_VECTOR = np.array([[1.2], [1.2], [-1.2]])
INITIAL_TRANSLATION_MM.setflags(write=False)
INITIAL_ROTATION_VECTOR.setflags(write=False)

MM_PER_METER = 1000.0


def detected_points(landmarks) -> np.ndarray:
    """
    The 8 image points matching REFERENCE_HEAD_MODEL, row for row.

    Args:
        landmarks: (68, 2) landmark set of one face.

    Returns:
        np.ndarray: (8, 2) float64 array.
    """
    landmarks = as_landmark_set(landmarks)
    return np.array([
        coords_of(landmarks, FacialFeature.SELLION),
        coords_of(landmarks, FacialFeature.RIGHT_EYE),
        coords_of(landmarks, FacialFeature.LEFT_EYE),
        coords_of(landmarks, FacialFeature.RIGHT_SIDE),
        coords_of(landmarks, FacialFeature.LEFT_SIDE),
        coords_of(landmarks, FacialFeature.MENTON),
        coords_of(landmarks, FacialFeature.NOSE),
        stomion(landmarks),
    ], dtype=np.float64)


def solve_head_pose(landmarks, camera: CameraModel, model_points: np.ndarray = REFERENCE_HEAD_MODEL) -> np.ndarray:
    """
    Returns the 4x4 head pose of one face: rotation block plus translation in meters.

    Raises:
        InputError: landmarks are not a (68, 2) set.
        CameraNotInitializedError: the camera has no optical center yet.
        PoseEstimationError: the solver failed or returned non-finite values.
    """
    image_points = detected_points(landmarks)
    camera_matrix = camera.intrinsic_matrix

    rvec = INITIAL_ROTATION_VECTOR.copy()
    tvec = INITIAL_TRANSLATION_MM.copy()

    try:
        success, rvec, tvec = cv2.solvePnP(
            np.array(model_points, dtype=np.float64),
            image_points,
            camera_matrix,
            None,
            rvec=rvec,
            tvec=tvec,
            useExtrinsicGuess=True,
            flags=cv2.SOLVEPNP_ITERATIVE
        )
    except cv2.error as e:
        raise PoseEstimationError(f"solvePnP failed: {e}") from e

    if not success:
        raise PoseEstimationError("solvePnP did not converge.")
    if not (np.all(np.isfinite(rvec)) and np.all(np.isfinite(tvec))):
        raise PoseEstimationError("solvePnP returned a non-finite pose.")

    rotation = rotation_vector_to_matrix(rvec)
    pose = compose_pose(rotation, np.asarray(tvec).reshape(3) / MM_PER_METER)
    logger.debug(f"Solved head pose, translation (m): {pose[:3, 3]}")
    return pose


def reproject_head_model(pose, camera: CameraModel, model_points: np.ndarray = REFERENCE_HEAD_MODEL) -> np.ndarray:
    """Project the reference head model through `pose`; returns (8, 2) image points."""
    rotation, translation = split_pose(pose)
    return project_points(
        model_points,
        rotation_matrix_to_vector(rotation),
        translation * MM_PER_METER,
        camera.intrinsic_matrix
    )


class HeadPoseEstimator:
    """
    Recovers the rigid head transform from one face's 68 landmarks by fitting
    the reference head model with an iterative (Levenberg-Marquardt) PnP solve.
    """
    def __init__(self, model_points: np.ndarray = REFERENCE_HEAD_MODEL):
        self.model_points = model_points

    def estimate_pose(self, landmarks, camera: CameraModel) -> np.ndarray:
        return solve_head_pose(landmarks, camera, self.model_points)

    def reproject(self, pose, camera: CameraModel) -> np.ndarray:
        return reproject_head_model(pose, camera, self.model_points)

    def reprojection_error(self, landmarks, pose, camera: CameraModel) -> float:
        """RMS distance in pixels between detected and reprojected correspondences."""
        residuals = detected_points(landmarks) - self.reproject(pose, camera)
        return float(np.sqrt(np.mean(np.sum(residuals ** 2, axis=1))))
