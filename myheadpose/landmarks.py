# myheadpose/landmarks.py

from enum import IntEnum
from typing import List, Tuple

import numpy as np

from .exceptions import InputError

LANDMARK_COUNT = 68


class FacialFeature(IntEnum):
    """
    Position of the named anatomical features in the 68-point landmark layout
    (iBUG 300-W convention, as produced by dlib's shape predictor).
    """
    RIGHT_SIDE = 0
    MENTON = 8
    LEFT_SIDE = 16
    EYEBROW_RIGHT = 21
    EYEBROW_LEFT = 22
    SELLION = 30
    NOSE = 33
    RIGHT_EYE = 36
    LEFT_EYE = 45
    MOUTH_RIGHT = 48
    MOUTH_UP = 51
    MOUTH_LEFT = 54
    MOUTH_DOWN = 57
    MOUTH_CENTER_TOP = 62
    MOUTH_CENTER_BOTTOM = 66


# (first, last, closed) index runs of the 68-point topology
FACE_CONTOURS: List[Tuple[int, int, bool]] = [
    (0, 16, False),   # jaw
    (17, 21, False),  # right brow
    (22, 26, False),  # left brow
    (27, 30, False),  # nose bridge
    (30, 35, True),   # nose base, 30-35 joins the nostril ends
    (36, 41, True),   # right eye
    (42, 47, True),   # left eye
    (48, 59, True),   # outer lip
    (60, 67, True),   # inner lip
]


def as_landmark_set(points) -> np.ndarray:
    """Coerce `points` to a (68, 2) float64 array or raise InputError."""
    arr = np.asarray(points, dtype=np.float64)
    if arr.shape != (LANDMARK_COUNT, 2):
        raise InputError(
            f"Expected {LANDMARK_COUNT} 2-D landmarks, got array of shape {arr.shape}."
        )
    return arr


def coords_of(landmarks: np.ndarray, feature: FacialFeature) -> np.ndarray:
    return landmarks[int(feature)]


def stomion(landmarks: np.ndarray) -> np.ndarray:
    # The mouth center is not detected directly: average the two inner-lip centers.
    top = coords_of(landmarks, FacialFeature.MOUTH_CENTER_TOP)
    bottom = coords_of(landmarks, FacialFeature.MOUTH_CENTER_BOTTOM)
    return (top + bottom) * 0.5
