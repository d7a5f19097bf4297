"""
Camera Capture Module
======================

Webcam acquisition for the hand control loop. Frames are pulled by the
display loop through ``pump()`` and handed to a single registered frame
callback, so all frame processing stays on the caller's thread.
"""

import cv2
import time
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Callable, Union
from urllib.parse import urlparse
import numpy as np

from ..errors import DeviceError, DeviceReason

logger = logging.getLogger(__name__)

SECURE_SCHEMES = ("https", "rtsps", "file")


@dataclass
class CaptureConstraints:
    """Requested capture properties."""
    width: int = 640
    height: int = 480
    facing_mode: str = "user"  # user or environment


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    device_id: int = 0
    environment_device_id: Optional[int] = None
    source: str = ""  # stream URL, overrides device ids when set
    width: int = 640
    height: int = 480
    facing_mode: str = "user"
    fps: int = 30
    buffer_size: int = 1  # Minimal buffering for low latency
    flip_horizontal: bool = False
    require_secure_source: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "CameraConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            device_id=config.get("device_id", 0),
            environment_device_id=config.get("environment_device_id"),
            source=config.get("source", "") or "",
            width=config.get("width", 640),
            height=config.get("height", 480),
            facing_mode=config.get("facing_mode", "user"),
            fps=config.get("fps", 30),
            buffer_size=config.get("buffer_size", 1),
            flip_horizontal=config.get("flip_horizontal", False),
            require_secure_source=config.get("require_secure_source", False),
        )

    @property
    def constraints(self) -> CaptureConstraints:
        return CaptureConstraints(self.width, self.height, self.facing_mode)


@dataclass
class Frame:
    """Container for captured frame with metadata."""
    image: np.ndarray
    timestamp: float
    frame_number: int

    @property
    def rgb(self) -> np.ndarray:
        """Convert BGR to RGB."""
        return cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)


FrameCallback = Callable[[Frame], None]


class Camera:
    """
    Webcam frame source.

    Nothing touches the device until ``acquire()``. ``release()`` drops the
    frame callback before the capture is closed, so no callback can run
    against a released device.

    Example:
        >>> camera = Camera(CameraConfig())
        >>> camera.acquire(CaptureConstraints())
        >>> camera.attach_frame_loop(on_frame)
        >>> while running:
        ...     camera.pump()
        >>> camera.release()
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._on_frame: Optional[FrameCallback] = None
        self._frame_number = 0
        self._resolution: Tuple[int, int] = (self.config.width, self.config.height)

    def acquire(self, constraints: Optional[CaptureConstraints] = None) -> None:
        """
        Open the video source.

        Raises:
            DeviceError: the source is insecure, missing, or yields no frames
        """
        if self._cap is not None:
            raise RuntimeError("Camera already acquired")

        constraints = constraints or self.config.constraints
        source = self._resolve_source(constraints)
        logger.info("Acquiring camera (source={}, {}x{}, facing={})".format(
            source, constraints.width, constraints.height, constraints.facing_mode))

        cap = self._open(source)
        if cap is None:
            raise DeviceError(DeviceReason.NOT_AVAILABLE, f"cannot open video source {source!r}")

        try:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)
            cap.set(cv2.CAP_PROP_FPS, self.config.fps)
            cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

            # A device that opens but never delivers a frame is usually blocked
            # by the OS privacy settings or held by another application.
            ok, image = cap.read()
            if not ok or image is None:
                raise DeviceError(
                    DeviceReason.PERMISSION_DENIED,
                    "camera opened but delivered no frames",
                )

            resolution = (
                int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or constraints.width,
                int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or constraints.height,
            )
        except Exception:
            cap.release()
            raise

        self._cap = cap
        self._frame_number = 0
        self._resolution = resolution
        logger.info("Camera acquired: {}x{}".format(*self._resolution))

    def _resolve_source(self, constraints: CaptureConstraints) -> Union[int, str]:
        if self.config.source:
            scheme = urlparse(self.config.source).scheme.lower()
            if self.config.require_secure_source and scheme not in SECURE_SCHEMES:
                raise DeviceError(
                    DeviceReason.INSECURE_CONTEXT,
                    f"refusing non-secure video source scheme {scheme!r}",
                )
            return self.config.source

        if constraints.facing_mode == "environment":
            if self.config.environment_device_id is None:
                raise DeviceError(
                    DeviceReason.NOT_AVAILABLE,
                    "no environment-facing camera configured",
                )
            return self.config.environment_device_id
        return self.config.device_id

    def _open(self, source: Union[int, str]) -> Optional[cv2.VideoCapture]:
        # Try V4L2 backend first for local devices, then the default backend
        backends = [cv2.CAP_V4L2, cv2.CAP_ANY] if isinstance(source, int) else [cv2.CAP_ANY]
        for backend in backends:
            cap = cv2.VideoCapture(source, backend)
            if cap.isOpened():
                return cap
            logger.debug("Backend {} failed for {!r}".format(backend, source))
            cap.release()
        return None

    def attach_frame_loop(self, on_frame: FrameCallback) -> None:
        """Register the callback invoked once per pumped frame."""
        self._on_frame = on_frame

    def detach_frame_loop(self) -> None:
        """Remove the frame callback."""
        self._on_frame = None

    def pump(self) -> bool:
        """
        Read one frame and hand it to the frame callback.

        Returns:
            True if a frame was delivered
        """
        if self._cap is None or self._on_frame is None:
            return False

        ok, image = self._cap.read()
        if not ok or image is None or image.size == 0:
            logger.warning("Failed to capture frame")
            return False

        if self.config.flip_horizontal:
            image = cv2.flip(image, 1)

        self._frame_number += 1
        frame = Frame(image=image, timestamp=time.time(), frame_number=self._frame_number)
        self._on_frame(frame)
        return True

    def release(self) -> None:
        """Detach the frame callback and release the device. Safe to repeat."""
        self.detach_frame_loop()
        if self._cap is None:
            return
        self._cap.release()
        self._cap = None
        logger.info("Camera released")

    @property
    def is_running(self) -> bool:
        """Check if the device is currently held."""
        return self._cap is not None

    @property
    def resolution(self) -> Tuple[int, int]:
        """Get current camera resolution."""
        return self._resolution

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
