import bz2
import sys

import numpy as np
import pytest
import requests
from unittest.mock import MagicMock, patch

from myheadpose.config import Config
from myheadpose.detectors import DlibLandmarkDetector, FaceLandmarks
from myheadpose.exceptions import ConfigurationError

# ------------------------------------------------------------------
# Config / model download
# ------------------------------------------------------------------

def fake_response(payload: bytes):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.iter_content.return_value = [payload[:10], payload[10:]]
    return response


def test_defaults_do_not_download():
    with patch("myheadpose.config.requests.get") as get:
        config = Config()
    get.assert_not_called()
    assert config.focal_length == 1000.0
    assert config.optical_center is None


def test_downloads_missing_model(tmp_path):
    target = tmp_path / "models" / "landmarks.dat"
    payload = b"shape predictor bytes" * 10

    with patch("myheadpose.config.requests.get", return_value=fake_response(payload)) as get:
        Config(landmark_model_path=str(target), landmark_model_url="http://example.com/landmarks.dat")

    get.assert_called_once()
    assert target.read_bytes() == payload


def test_decompresses_bz2_model(tmp_path):
    target = tmp_path / "landmarks.dat"
    payload = b"\x00\x01model" * 50

    with patch("myheadpose.config.requests.get", return_value=fake_response(bz2.compress(payload))):
        Config(landmark_model_path=str(target), landmark_model_url="http://example.com/landmarks.dat.bz2")

    assert target.read_bytes() == payload


def test_existing_model_is_not_downloaded(tmp_path):
    target = tmp_path / "landmarks.dat"
    target.write_bytes(b"already here")
    with patch("myheadpose.config.requests.get") as get:
        Config(landmark_model_path=str(target), landmark_model_url="http://example.com/landmarks.dat")
    get.assert_not_called()


def test_failed_download_is_fatal(tmp_path):
    target = tmp_path / "landmarks.dat"
    with patch("myheadpose.config.requests.get", side_effect=requests.ConnectionError("offline")):
        with pytest.raises(ConfigurationError):
            Config(landmark_model_path=str(target), landmark_model_url="http://example.com/landmarks.dat")
    assert not target.exists()
    assert not (tmp_path / "landmarks.dat.part").exists()


# ------------------------------------------------------------------
# DlibLandmarkDetector, with dlib replaced by a MagicMock
# ------------------------------------------------------------------

@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "shape_predictor_68_face_landmarks.dat"
    path.write_bytes(b"fake")
    return str(path)


@pytest.fixture
def fake_dlib():
    dlib = MagicMock()

    rect = MagicMock()
    rect.left.return_value = 10
    rect.top.return_value = 20
    rect.right.return_value = 110
    rect.bottom.return_value = 140

    shape = MagicMock()
    shape.part.side_effect = lambda i: MagicMock(x=i, y=2 * i)

    dlib.get_frontal_face_detector.return_value = MagicMock(return_value=[rect])
    dlib.shape_predictor.return_value = MagicMock(return_value=shape)

    with patch.dict(sys.modules, {"dlib": dlib}):
        yield dlib


def test_dlib_detector_missing_model(tmp_path):
    with pytest.raises(ConfigurationError):
        DlibLandmarkDetector(str(tmp_path / "nope.dat"))


def test_dlib_detector_corrupt_model(model_file, fake_dlib):
    fake_dlib.shape_predictor.side_effect = RuntimeError("Unable to open file")
    with pytest.raises(ConfigurationError):
        DlibLandmarkDetector(model_file)


def test_dlib_detector_detect(model_file, fake_dlib):
    detector = DlibLandmarkDetector(model_file, upsample=1)
    faces = detector.detect(np.zeros((200, 200, 3), dtype=np.uint8))

    fake_dlib.shape_predictor.assert_called_once_with(model_file)
    assert len(faces) == 1
    assert isinstance(faces[0], FaceLandmarks)
    assert faces[0].box == (10, 20, 110, 140)
    assert faces[0].points.shape == (68, 2)
    assert np.array_equal(faces[0].points[67], [67, 134])


def test_truncated_bz2_download_is_fatal(tmp_path):
    target = tmp_path / "landmarks.dat"
    compressed = bz2.compress(b"\x00\x01model" * 5000)

    with patch("myheadpose.config.requests.get",
               return_value=fake_response(compressed[:len(compressed) // 2])):
        with pytest.raises(ConfigurationError, match="truncated"):
            Config(landmark_model_path=str(target), landmark_model_url="http://example.com/landmarks.dat.bz2")

    assert not target.exists()
    assert not (tmp_path / "landmarks.dat.part").exists()
