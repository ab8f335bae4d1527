# myheadpose/rendering.py

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .camera import CameraModel
from .geometry import project_points, rotation_matrix_to_vector, split_pose
from .landmarks import FACE_CONTOURS, FacialFeature, coords_of
from .pose_estimator import MM_PER_METER

# BGR
LINE_COLOR = (0, 128, 128)
X_AXIS_COLOR = (0, 0, 255)
Y_AXIS_COLOR = (0, 255, 0)
Z_AXIS_COLOR = (255, 0, 0)
TEXT_COLOR = (0, 0, 255)
LINE_THICKNESS = 2
MAX_PIXEL_COORD = 2 ** 30
FONT_SCALE = 0.5

AXIS_LENGTH_MM = 50.0
AXES_3D = np.array([
    [0., 0., 0.],
    [AXIS_LENGTH_MM, 0., 0.],
    [0., AXIS_LENGTH_MM, 0.],
    [0., 0., AXIS_LENGTH_MM],
], dtype=np.float64)

Segment = Tuple[np.ndarray, np.ndarray]


@dataclass
class PoseOverlay:
    origin: np.ndarray
    x_tip: np.ndarray
    y_tip: np.ndarray
    z_tip: np.ndarray
    label: str
    anchor: Optional[np.ndarray] = None

    @property
    def is_drawable(self) -> bool:
        # cv2 draws on int32 pixel coordinates
        points = np.array([self.origin, self.x_tip, self.y_tip, self.z_tip])
        return bool(np.all(np.isfinite(points)) and np.all(np.abs(points) < MAX_PIXEL_COORD))

    def axis_segments(self) -> List[Tuple[Segment, Tuple[int, int, int]]]:
        return [
            ((self.origin, self.x_tip), X_AXIS_COLOR),
            ((self.origin, self.y_tip), Y_AXIS_COLOR),
            ((self.origin, self.z_tip), Z_AXIS_COLOR),
        ]


def _pt(p) -> Tuple[int, int]:
    return int(round(float(p[0]))), int(round(float(p[1])))


def feature_segments(points) -> List[Segment]:
    """Line segments joining the 68 landmarks into jaw, brows, nose, eyes and lips."""
    segments = []
    for first, last, closed in FACE_CONTOURS:
        for i in range(first + 1, last + 1):
            segments.append((points[i - 1], points[i]))
        if closed:
            segments.append((points[first], points[last]))
    return segments


def translation_label(pose) -> str:
    """'(Xcm, Ycm, Zcm)', each component truncated toward zero."""
    _, translation = split_pose(pose)
    x, y, z = (int(v * 100) for v in translation.reshape(3))
    return f"({x}cm, {y}cm, {z}cm)"


def pose_overlay(pose, camera: CameraModel, anchor=None) -> PoseOverlay:
    """
    Project a 50mm axis triad through `pose` with the camera used to solve it.

    Args:
        pose: 4x4 head pose, translation in meters.
        camera: the estimator's camera model.
        anchor: where the translation label goes, usually the sellion landmark.
    """
    rotation, translation = split_pose(pose)
    rvec = rotation_matrix_to_vector(rotation)
    projected = project_points(AXES_3D, rvec, translation * MM_PER_METER, camera.intrinsic_matrix)
    return PoseOverlay(
        origin=projected[0],
        x_tip=projected[1],
        y_tip=projected[2],
        z_tip=projected[3],
        label=translation_label(pose),
        anchor=None if anchor is None else np.asarray(anchor, dtype=np.float64),
    )


def draw_features(image: np.ndarray, landmark_sets: Sequence[np.ndarray]) -> None:
    for points in landmark_sets:
        for start, end in feature_segments(points):
            cv2.line(image, _pt(start), _pt(end), LINE_COLOR, LINE_THICKNESS, cv2.LINE_AA)


def draw_pose(image: np.ndarray, overlay: PoseOverlay) -> None:
    for (start, end), color in overlay.axis_segments():
        cv2.line(image, _pt(start), _pt(end), color, LINE_THICKNESS, cv2.LINE_AA)
    if overlay.anchor is not None:
        cv2.putText(image, overlay.label, _pt(overlay.anchor), cv2.FONT_HERSHEY_SIMPLEX,
                    FONT_SCALE, TEXT_COLOR, LINE_THICKNESS)


def draw_detections(image: np.ndarray, landmark_sets: Sequence[np.ndarray],
                    poses: Sequence[Optional[np.ndarray]], camera: CameraModel) -> np.ndarray:
    """
    Returns a copy of `image` with the landmark contours, one axis triad per
    pose and its translation label. `None` entries in `poses` are skipped,
    as are poses whose axis triad projects outside the drawable range.

    `poses[i]` must belong to the face of `landmark_sets[i]`; this is not checked.
    """
    result = image.copy()
    if len(landmark_sets) > 0:
        draw_features(result, landmark_sets)

    for face_idx, pose in enumerate(poses):
        if pose is None:
            continue
        anchor = None
        if face_idx < len(landmark_sets):
            anchor = coords_of(landmark_sets[face_idx], FacialFeature.SELLION)
        overlay = pose_overlay(pose, camera, anchor)
        if not overlay.is_drawable:
            # head on the camera plane: the triad has no image
            continue
        draw_pose(result, overlay)
    return result
