import numpy as np
import pytest
from unittest.mock import MagicMock

from myheadpose.detectors import FaceLandmarks, LandmarkDetector
from myheadpose.geometry import rotation_vector_to_matrix
from myheadpose.landmarks import FacialFeature
from myheadpose.pose_estimator import REFERENCE_HEAD_MODEL

# Head facing the camera: head x (forward) -> camera -z, head y (left) -> camera +x,
# head z (up) -> camera -y.
FRONTAL = np.array([
    [0., 1., 0.],
    [0., 0., -1.],
    [-1., 0., 0.],
])


def project(points_3d, rotation, translation_mm, focal_length, center):
    cam = points_3d @ np.asarray(rotation).T + np.asarray(translation_mm).reshape(1, 3)
    u = focal_length * cam[:, 0] / cam[:, 2] + center[0]
    v = focal_length * cam[:, 1] / cam[:, 2] + center[1]
    return np.stack([u, v], axis=1)


def synthetic_landmarks(rotation, translation_mm, focal_length=1000.0, center=(320.0, 240.0),
                        mouth_gap=4.0):
    """
    68 landmarks whose 8 pose correspondences are the exact projection of the
    reference head model. Unused landmarks are spread around the sellion.
    """
    projected = project(REFERENCE_HEAD_MODEL, rotation, translation_mm, focal_length, center)
    points = projected[0] + np.stack([np.arange(68) % 7, np.arange(68) % 5], axis=1).astype(float)

    for row, feature in enumerate([
        FacialFeature.SELLION,
        FacialFeature.RIGHT_EYE,
        FacialFeature.LEFT_EYE,
        FacialFeature.RIGHT_SIDE,
        FacialFeature.LEFT_SIDE,
        FacialFeature.MENTON,
        FacialFeature.NOSE,
    ]):
        points[feature] = projected[row]

    stomion = projected[7]
    points[FacialFeature.MOUTH_CENTER_TOP] = stomion - [0.0, mouth_gap / 2]
    points[FacialFeature.MOUTH_CENTER_BOTTOM] = stomion + [0.0, mouth_gap / 2]
    return points


@pytest.fixture
def frontal():
    return FRONTAL.copy()


@pytest.fixture
def tilted():
    """Frontal head turned by roughly 11 degrees about an oblique axis."""
    return rotation_vector_to_matrix([0.1, -0.15, 0.05]) @ FRONTAL


@pytest.fixture
def make_landmarks():
    return synthetic_landmarks


@pytest.fixture
def mock_detector():
    detector = MagicMock(spec=LandmarkDetector)
    detector.detect.return_value = []
    return detector


def as_faces(*landmark_sets):
    return [FaceLandmarks(box=(0, 0, 10, 10), points=points) for points in landmark_sets]


@pytest.fixture
def faces_from():
    return as_faces
