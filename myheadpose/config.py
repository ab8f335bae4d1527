# myheadpose/config.py

import bz2
import logging
import os

import requests

from .camera import DEFAULT_FOCAL_LENGTH
from .exceptions import ConfigurationError

DLIB_68_LANDMARKS_URL = "http://dlib.net/files/shape_predictor_68_face_landmarks.dat.bz2"


class Config:
    def __init__(
        self,
        landmark_model_path=None,
        landmark_model_url=None,
        focal_length=DEFAULT_FOCAL_LENGTH,
        optical_center=None,
        upsample=0,
        download_timeout=60
    ):
        """
        Args:
            landmark_model_path (str, optional): dlib 68-point shape predictor file.
            landmark_model_url (str, optional): Where to fetch the model when
                `landmark_model_path` does not exist yet. Nothing is downloaded
                unless this is set.
            focal_length (float): Pinhole focal length, in pixels.
            optical_center (tuple, optional): (cx, cy). Taken from the first
                frame's center when omitted.
            upsample (int): Upsampling passes of the dlib face detector.
            download_timeout (float): Seconds before a model download gives up.
        """
        self.landmark_model_path = landmark_model_path
        self.landmark_model_url = landmark_model_url
        self.focal_length = float(focal_length)
        self.optical_center = optical_center
        self.upsample = upsample
        self.download_timeout = download_timeout

        if (self.landmark_model_path and self.landmark_model_url
                and not os.path.exists(self.landmark_model_path)):
            self._download_model(self.landmark_model_url, self.landmark_model_path)

    def _download_model(self, url, save_path):
        # .bz2 archives (the form dlib publishes its models in) are unpacked on the fly
        decompressor = bz2.BZ2Decompressor() if url.endswith(".bz2") else None
        tmp_path = save_path + ".part"
        try:
            logger.info(f"Downloading landmark model from {url}...")
            directory = os.path.dirname(save_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            response = requests.get(url, stream=True, timeout=self.download_timeout)
            response.raise_for_status()
            with open(tmp_path, 'wb') as f:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        f.write(decompressor.decompress(chunk) if decompressor else chunk)
            if decompressor is not None and not decompressor.eof:
                raise EOFError("truncated bz2 stream")
            os.replace(tmp_path, save_path)
            logger.info(f"Landmark model downloaded and saved to {save_path}.")
        except (requests.RequestException, OSError, EOFError) as e:
            logger.error(f"Failed to download landmark model from {url}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise ConfigurationError(f"Failed to download landmark model from {url}: {e}") from e


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)
