# myheadpose/geometry.py

from typing import Optional, Tuple

import cv2
import numpy as np

PARALLEL_EPS = 1e-8


def rotation_vector_to_matrix(rotation_vector) -> np.ndarray:
    rvec = np.asarray(rotation_vector, dtype=np.float64).reshape(3, 1)
    rotation, _ = cv2.Rodrigues(rvec)
    return rotation


def rotation_matrix_to_vector(rotation) -> np.ndarray:
    rmat = np.ascontiguousarray(rotation, dtype=np.float64).reshape(3, 3)
    rvec, _ = cv2.Rodrigues(rmat)
    return rvec.reshape(3, 1)


def compose_pose(rotation, translation) -> np.ndarray:
    """
    Build a 4x4 rigid transform from a 3x3 rotation and a translation.

    The translation is stored as given; unit conversion is the caller's job.
    """
    pose = np.eye(4, dtype=np.float64)
    pose[:3, :3] = np.asarray(rotation, dtype=np.float64).reshape(3, 3)
    pose[:3, 3] = np.asarray(translation, dtype=np.float64).reshape(3)
    return pose


def split_pose(pose) -> Tuple[np.ndarray, np.ndarray]:
    """Return (rotation 3x3, translation 3x1) views of a 4x4 pose."""
    pose = np.asarray(pose, dtype=np.float64)
    if pose.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 pose matrix, got shape {pose.shape}.")
    return pose[:3, :3], pose[:3, 3].reshape(3, 1)


def project_points(points_3d, rotation_vector, translation, camera_matrix) -> np.ndarray:
    """
    Project 3-D points through a distortion-free pinhole camera.

    Args:
        points_3d: (N, 3) points in the model frame.
        rotation_vector: Rodrigues vector of the model-to-camera rotation.
        translation: model-to-camera translation, same units as `points_3d`.
        camera_matrix: 3x3 intrinsics.

    Returns:
        np.ndarray: (N, 2) image points.
    """
    object_points = np.array(points_3d, dtype=np.float64).reshape(-1, 1, 3)
    projected, _ = cv2.projectPoints(
        object_points,
        np.asarray(rotation_vector, dtype=np.float64).reshape(3, 1),
        np.asarray(translation, dtype=np.float64).reshape(3, 1),
        np.asarray(camera_matrix, dtype=np.float64),
        None
    )
    return projected.reshape(-1, 2)


def euler_angles(rotation) -> Tuple[float, float, float]:
    """
    Returns (yaw, pitch, roll) in degrees for a 3x3 rotation matrix.
    Falls back to roll = 0 close to gimbal lock.
    """
    r = np.asarray(rotation, dtype=np.float64)
    sy = np.sqrt(r[0, 0] ** 2 + r[1, 0] ** 2)
    if sy < 1e-6:
        x = np.arctan2(-r[1, 2], r[1, 1])
        y = np.arctan2(-r[2, 0], sy)
        z = 0.0
    else:
        x = np.arctan2(r[2, 1], r[2, 2])   # pitch
        y = np.arctan2(-r[2, 0], sy)       # yaw
        z = np.arctan2(r[1, 0], r[0, 0])   # roll
    return float(np.degrees(y)), float(np.degrees(x)), float(np.degrees(z))


def line_intersection(o1, p1, o2, p2) -> Optional[np.ndarray]:
    """
    Intersection of the line through (o1, p1) with the line through (o2, p2).

    Returns None when the lines are parallel.
    """
    o1 = np.asarray(o1, dtype=np.float64)
    o2 = np.asarray(o2, dtype=np.float64)
    d1 = np.asarray(p1, dtype=np.float64) - o1
    d2 = np.asarray(p2, dtype=np.float64) - o2
    x = o2 - o1

    cross = d1[0] * d2[1] - d1[1] * d2[0]
    if abs(cross) < PARALLEL_EPS:
        return None

    t1 = (x[0] * d2[1] - x[1] * d2[0]) / cross
    return o1 + d1 * t1
