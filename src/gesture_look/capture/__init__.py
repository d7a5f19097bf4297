"""Camera frame acquisition."""
from .camera import Camera, CameraConfig, CaptureConstraints, Frame

__all__ = ["Camera", "CameraConfig", "CaptureConstraints", "Frame"]
