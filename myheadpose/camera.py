# myheadpose/camera.py

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .exceptions import CameraNotInitializedError

logger = logging.getLogger(__name__)

DEFAULT_FOCAL_LENGTH = 1000.0


class OpticalCenterState(enum.Enum):
    UNSET = "unset"
    SET = "set"


@dataclass
class CameraModel:
    """
    Ideal pinhole camera: one focal length for both axes, zero skew and no
    lens distortion.

    The optical center starts UNSET unless given explicitly. The first call to
    `initialize_from_image` moves it to SET at the image center; every later
    call leaves it untouched, even for frames of a different size.
    """
    focal_length: float = DEFAULT_FOCAL_LENGTH
    optical_center_x: float = 0.0
    optical_center_y: float = 0.0
    state: OpticalCenterState = OpticalCenterState.UNSET

    @classmethod
    def create(cls, focal_length: float = DEFAULT_FOCAL_LENGTH,
               optical_center: Optional[Tuple[float, float]] = None) -> "CameraModel":
        if optical_center is None:
            return cls(focal_length=float(focal_length))
        cx, cy = optical_center
        return cls(
            focal_length=float(focal_length),
            optical_center_x=float(cx),
            optical_center_y=float(cy),
            state=OpticalCenterState.SET,
        )

    @property
    def is_initialized(self) -> bool:
        return self.state is OpticalCenterState.SET

    @property
    def optical_center(self) -> Tuple[float, float]:
        return self.optical_center_x, self.optical_center_y

    def initialize_from_image(self, image: np.ndarray) -> bool:
        """Fix the optical center to the image center. Returns True if it changed state."""
        if self.is_initialized:
            return False
        height, width = image.shape[:2]
        self.optical_center_x = width / 2
        self.optical_center_y = height / 2
        self.state = OpticalCenterState.SET
        logger.info(
            f"Setting the optical center to ({self.optical_center_x:.1f}, {self.optical_center_y:.1f})"
        )
        return True

    @property
    def intrinsic_matrix(self) -> np.ndarray:
        if not self.is_initialized:
            raise CameraNotInitializedError(
                "Optical center is not set yet: process a frame first or pass optical_center explicitly."
            )
        f = self.focal_length
        return np.array([
            [f, 0.0, self.optical_center_x],
            [0.0, f, self.optical_center_y],
            [0.0, 0.0, 1.0]
        ], dtype=np.float64)
