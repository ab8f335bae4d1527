# myheadpose/detectors.py

import abc
import logging
import os
from dataclasses import dataclass
from typing import List, Tuple

import cv2
import numpy as np

from .exceptions import ConfigurationError
from .landmarks import LANDMARK_COUNT

logger = logging.getLogger(__name__)


@dataclass
class FaceLandmarks:
    """One detected face: its (x1, y1, x2, y2) region and its 68 landmarks."""
    box: Tuple[int, int, int, int]
    points: np.ndarray


class LandmarkDetector(abc.ABC):
    """
    Abstract base class for any face + 68-point landmark detector.
    """
    @abc.abstractmethod
    def detect(self, image: np.ndarray) -> List[FaceLandmarks]:
        """
        Returns one FaceLandmarks per detected face, in detection order.
        Failures must raise; an empty list means no face was found.
        """
        pass


class DlibLandmarkDetector(LandmarkDetector):
    def __init__(self, model_path: str, upsample: int = 0):
        """
        Args:
            model_path (str): Path to a dlib 68-point shape predictor (.dat).
            upsample (int): Times the frontal face detector upsamples the image.
        """
        if not model_path or not os.path.exists(model_path):
            raise ConfigurationError(f"Landmark model not found at {model_path}.")

        try:
            import dlib
        except ImportError as e:
            raise ConfigurationError(
                "DlibLandmarkDetector requires dlib: pip install 'myheadpose[dlib]'."
            ) from e

        try:
            self.detector = dlib.get_frontal_face_detector()
            self.predictor = dlib.shape_predictor(model_path)
        except RuntimeError as e:
            logger.error(f"Failed to load landmark model from {model_path}: {e}")
            raise ConfigurationError(f"Cannot load landmark model {model_path}: {e}") from e

        self.model_path = model_path
        self.upsample = upsample
        logger.info(f"Loaded landmark model from {model_path}")

    def detect(self, image: np.ndarray) -> List[FaceLandmarks]:
        # dlib wants RGB (or grayscale) uint8
        if image.ndim == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

        faces = []
        for rect in self.detector(image, self.upsample):
            shape = self.predictor(image, rect)
            points = np.array(
                [(shape.part(i).x, shape.part(i).y) for i in range(LANDMARK_COUNT)],
                dtype=np.float64
            )
            box = (rect.left(), rect.top(), rect.right(), rect.bottom())
            faces.append(FaceLandmarks(box=box, points=points))
        logger.debug(f"Detected {len(faces)} face(s).")
        return faces
