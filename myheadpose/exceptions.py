# myheadpose/exceptions.py


class HeadPoseError(Exception):
    """Base class for every error raised by myheadpose."""


class ConfigurationError(HeadPoseError, RuntimeError):
    """The landmark model (or another construction-time resource) is unusable."""


class InputError(HeadPoseError, ValueError):
    """An image or landmark array passed in by the caller is invalid."""


class DetectionError(HeadPoseError, RuntimeError):
    """The landmark detector returned something that breaks its contract."""


class PoseEstimationError(HeadPoseError, RuntimeError):
    """The PnP solve failed or produced a degenerate pose."""


class CameraNotInitializedError(HeadPoseError, RuntimeError):
    """Intrinsics were requested before the optical center was known."""
