"""
Controlled View
================

The view rotated by the hand control: an image rendered through a 3-D
perspective rotation, equivalent to the CSS transform
``perspective(P) rotateX(x) rotateY(y)``, plus an optional best-effort
message channel that forwards the rotation to an external viewer.
"""

import cv2
import json
import math
import socket
import time
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class ChannelConfig:
    """UDP message channel settings."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 9870

    @classmethod
    def from_dict(cls, config: dict) -> "ChannelConfig":
        return cls(
            enabled=config.get("enabled", False),
            host=config.get("host", "127.0.0.1"),
            port=config.get("port", 9870),
        )


@dataclass
class ViewConfig:
    """Controlled view settings."""
    image_path: str = ""
    width: int = 960
    height: int = 600
    perspective: float = 1000.0   # pixels from viewer to the view plane
    transition_ms: float = 100.0  # ease-out duration between transforms
    channel: ChannelConfig = field(default_factory=ChannelConfig)

    @classmethod
    def from_dict(cls, config: dict) -> "ViewConfig":
        """Create config from dictionary."""
        return cls(
            image_path=config.get("image_path", "") or "",
            width=config.get("width", 960),
            height=config.get("height", 600),
            perspective=config.get("perspective", 1000.0),
            transition_ms=config.get("transition_ms", 100.0),
            channel=ChannelConfig.from_dict(config.get("channel", {})),
        )


@dataclass
class ViewTransform:
    """Perspective rotation applied to the view, angles in degrees."""
    rotation_x: float = 0.0
    rotation_y: float = 0.0
    perspective: float = 1000.0

    def to_css(self) -> str:
        return (f"perspective({self.perspective:g}px) "
                f"rotateX({self.rotation_x}deg) rotateY({self.rotation_y}deg)")

    def homography(self, width: int, height: int) -> np.ndarray:
        """3x3 matrix mapping view pixels to their rotated screen position."""
        src = np.float32([[0, 0], [width, 0], [width, height], [0, height]])
        dst = np.float32([self._project(x, y, width, height) for x, y in src])
        return cv2.getPerspectiveTransform(src, dst)

    def _project(self, px: float, py: float, width: int, height: int) -> Tuple[float, float]:
        # Rotate about the view center (y down, z toward the viewer),
        # rotateY first, then rotateX, then perspective divide.
        cx, cy = width / 2.0, height / 2.0
        x, y, z = px - cx, py - cy, 0.0

        ay = math.radians(self.rotation_y)
        x, z = x * math.cos(ay) + z * math.sin(ay), -x * math.sin(ay) + z * math.cos(ay)

        ax = math.radians(self.rotation_x)
        y, z = y * math.cos(ax) - z * math.sin(ax), y * math.sin(ax) + z * math.cos(ax)

        scale = self.perspective / (self.perspective - z)
        return cx + x * scale, cy + y * scale


def ease_out(t: float) -> float:
    """Cubic ease-out on [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return 1.0 - (1.0 - t) ** 3


def default_view_image(width: int, height: int) -> np.ndarray:
    """Grid placeholder shown when no image is configured."""
    image = np.full((height, width, 3), (48, 32, 24), dtype=np.uint8)
    for x in range(0, width, 60):
        cv2.line(image, (x, 0), (x, height), (110, 90, 70), 1)
    for y in range(0, height, 60):
        cv2.line(image, (0, y), (width, y), (110, 90, 70), 1)
    cv2.rectangle(image, (0, 0), (width - 1, height - 1), (200, 180, 160), 3)
    return image


class ViewChannel:
    """
    Fire-and-forget JSON datagrams to an external viewer.

    Delivery is best effort; send failures are logged at debug level only.
    """

    def __init__(self, config: Optional[ChannelConfig] = None):
        self.config = config or ChannelConfig()
        self._sock: Optional[socket.socket] = None
        self.failures = 0

    def post(self, message: dict) -> bool:
        try:
            if self._sock is None:
                self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            payload = json.dumps(message).encode("utf-8")
            self._sock.sendto(payload, (self.config.host, self.config.port))
            return True
        except OSError as e:
            self.failures += 1
            logger.debug(f"View message not delivered: {e}")
            return False

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


class ImageView:
    """
    Image rendered through the current ``ViewTransform``.

    ``set_transform`` records a new target; ``render`` eases from the
    previously displayed rotation toward it over ``transition_ms``.
    Passing None clears the transform immediately.
    """

    def __init__(
        self,
        config: Optional[ViewConfig] = None,
        image: Optional[np.ndarray] = None,
        channel: Optional[ViewChannel] = None,
    ):
        self.config = config or ViewConfig()
        if image is None:
            image = self._load_image()
        self.image = image
        self.channel = channel
        self.transform: Optional[ViewTransform] = None
        self._from = (0.0, 0.0)
        self._changed_at = 0.0

    def _load_image(self) -> np.ndarray:
        if self.config.image_path:
            image = cv2.imread(self.config.image_path)
            if image is not None:
                return cv2.resize(image, (self.config.width, self.config.height))
            logger.warning(f"Could not read view image {self.config.image_path}, using placeholder")
        return default_view_image(self.config.width, self.config.height)

    def set_transform(self, transform: Optional[ViewTransform], now: Optional[float] = None) -> None:
        now = time.monotonic() if now is None else now
        if transform is None:
            self._from = (0.0, 0.0)
        else:
            self._from = self.displayed_rotation(now)
        self.transform = transform
        self._changed_at = now

    def displayed_rotation(self, now: Optional[float] = None) -> Tuple[float, float]:
        """Rotation (x, y) currently on screen, mid-transition included."""
        if self.transform is None:
            return (0.0, 0.0)
        now = time.monotonic() if now is None else now
        duration = self.config.transition_ms / 1000.0
        t = 1.0 if duration <= 0 else ease_out((now - self._changed_at) / duration)
        fx, fy = self._from
        return (
            fx + (self.transform.rotation_x - fx) * t,
            fy + (self.transform.rotation_y - fy) * t,
        )

    def post_message(self, message: dict) -> bool:
        if self.channel is None:
            return False
        return self.channel.post(message)

    def render(self, now: Optional[float] = None) -> np.ndarray:
        """Return the view image with the displayed transform applied."""
        if self.transform is None:
            return self.image.copy()
        rx, ry = self.displayed_rotation(now)
        shown = ViewTransform(rx, ry, self.transform.perspective)
        h, w = self.image.shape[:2]
        return cv2.warpPerspective(self.image, shown.homography(w, h), (w, h))

    def close(self) -> None:
        if self.channel is not None:
            self.channel.close()
