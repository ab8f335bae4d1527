import logging

import numpy as np
import pytest

from myheadpose.camera import CameraModel, OpticalCenterState
from myheadpose.exceptions import CameraNotInitializedError


def test_starts_unset():
    camera = CameraModel.create(focal_length=800)
    assert camera.state is OpticalCenterState.UNSET
    with pytest.raises(CameraNotInitializedError):
        camera.intrinsic_matrix


def test_first_image_sets_optical_center_once():
    camera = CameraModel.create(focal_length=800)
    assert camera.initialize_from_image(np.zeros((480, 640, 3), np.uint8))
    assert camera.optical_center == (320.0, 240.0)

    assert not camera.initialize_from_image(np.zeros((100, 200, 3), np.uint8))
    assert camera.optical_center == (320.0, 240.0)
    assert camera.state is OpticalCenterState.SET


def test_explicit_optical_center():
    camera = CameraModel.create(focal_length=500, optical_center=(12.5, 40))
    assert camera.is_initialized
    camera.initialize_from_image(np.zeros((10, 10), np.uint8))
    assert np.allclose(camera.intrinsic_matrix, [
        [500, 0, 12.5],
        [0, 500, 40],
        [0, 0, 1],
    ])


def test_logs_optical_center(caplog):
    caplog.set_level(logging.INFO, logger="myheadpose.camera")
    CameraModel.create().initialize_from_image(np.zeros((480, 640, 3), np.uint8))
    assert "Setting the optical center to (320.0, 240.0)" in caplog.text
