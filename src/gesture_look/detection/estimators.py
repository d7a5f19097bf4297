"""
Hand Position Estimators
=========================

Two interchangeable strategies that turn one camera frame into zero or one
normalized hand position:

- ``PixelHeuristicEstimator``: centroid of skin-coloured pixel samples
- ``LandmarkEstimator``: wrist landmark from the MediaPipe hand landmarker
"""

import cv2
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, NamedTuple, Optional
import numpy as np

from ..capture.camera import Frame
from ..errors import DetectorUnavailable
from .hand_detector import HandDetector, HandDetectorConfig, HandLandmarks, LandmarkIndex

logger = logging.getLogger(__name__)

STRATEGY_PIXEL = "pixel"
STRATEGY_LANDMARK = "landmark"
STRATEGIES = (STRATEGY_PIXEL, STRATEGY_LANDMARK)


class NormalizedPosition(NamedTuple):
    """Image-space hand position, both axes in [0, 1]."""
    x: float
    y: float


@dataclass
class PixelHeuristicConfig:
    """Skin-colour heuristic settings."""
    canvas_width: int = 640
    canvas_height: int = 480
    sample_stride: int = 10   # every Nth pixel in row-major order
    min_samples: int = 100    # fewer matches than this means no hand

    @classmethod
    def from_dict(cls, config: dict) -> "PixelHeuristicConfig":
        """Create config from dictionary."""
        return cls(
            canvas_width=config.get("canvas_width", 640),
            canvas_height=config.get("canvas_height", 480),
            sample_stride=config.get("sample_stride", 10),
            min_samples=config.get("min_samples", 100),
        )


class HandEstimator(ABC):
    """Produces at most one hand position per frame."""

    name: str = ""

    def open(self) -> None:
        """Allocate per-session resources."""

    def close(self) -> None:
        """Release per-session resources."""

    @abstractmethod
    def estimate(self, frame: Frame) -> Optional[NormalizedPosition]:
        """Return the hand position in ``frame``, or None if no hand is found."""


def skin_mask(rgb: np.ndarray) -> np.ndarray:
    """
    Classify RGB samples as skin-like.

    Args:
        rgb: Array of shape (N, 3) with R, G, B columns

    Returns:
        Boolean array of shape (N,)
    """
    rgb = rgb.astype(np.int16)
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    spread = rgb.max(axis=1) - rgb.min(axis=1)
    return (r > 95) & (g > 40) & (b > 20) & (r > g) & (r > b) & (spread > 15)


class PixelHeuristicEstimator(HandEstimator):
    """
    Skin-colour centroid estimator.

    The frame is scaled onto a fixed processing canvas and only every
    ``sample_stride``-th pixel is classified; a centroid needs no more.
    """

    name = STRATEGY_PIXEL

    def __init__(self, config: Optional[PixelHeuristicConfig] = None):
        self.config = config or PixelHeuristicConfig()
        self._canvas: Optional[np.ndarray] = None

    def open(self) -> None:
        self._canvas = np.zeros(
            (self.config.canvas_height, self.config.canvas_width, 3), dtype=np.uint8
        )

    def close(self) -> None:
        self._canvas = None

    def estimate(self, frame: Frame) -> Optional[NormalizedPosition]:
        if self._canvas is None:
            self.open()

        width, height = self.config.canvas_width, self.config.canvas_height
        canvas = cv2.resize(frame.rgb, (width, height), dst=self._canvas)

        indices = np.arange(0, width * height, self.config.sample_stride)
        samples = canvas.reshape(-1, 3)[indices]
        hits = indices[skin_mask(samples)]

        # Inclusive: exactly min_samples hits is a hand, not ">" min_samples
        if hits.size < self.config.min_samples:
            return None

        xs = hits % width
        ys = hits // width
        return NormalizedPosition(float(xs.mean()) / width, float(ys.mean()) / height)


class LandmarkEstimator(HandEstimator):
    """
    MediaPipe wrist estimator.

    Frames are pushed into the detector; its results listener buffers the
    wrist position of the first hand, which ``estimate()`` hands back.
    """

    name = STRATEGY_LANDMARK

    def __init__(self, detector: HandDetector):
        self._detector = detector
        self._buffered: Optional[NormalizedPosition] = None

    def open(self) -> None:
        if not self._detector.start():
            raise DetectorUnavailable("hand landmark model could not be loaded")
        self._detector.on_results(self._on_results)

    def close(self) -> None:
        self._detector.stop()
        self._buffered = None

    def _on_results(self, hands: List[HandLandmarks]) -> None:
        if not hands:
            self._buffered = None
            return
        wrist = hands[0].get(LandmarkIndex.WRIST)
        self._buffered = NormalizedPosition(wrist.x, wrist.y)

    def estimate(self, frame: Frame) -> Optional[NormalizedPosition]:
        self._buffered = None
        self._detector.send(frame.rgb, int(frame.timestamp * 1000))
        position, self._buffered = self._buffered, None
        return position


def create_estimator(
    strategy: str,
    pixel_config: Optional[PixelHeuristicConfig] = None,
    detector_config: Optional[HandDetectorConfig] = None,
) -> HandEstimator:
    """Build the estimator for ``strategy`` ("pixel" or "landmark")."""
    if strategy == STRATEGY_PIXEL:
        return PixelHeuristicEstimator(pixel_config)
    if strategy == STRATEGY_LANDMARK:
        return LandmarkEstimator(HandDetector(detector_config))
    raise ValueError(f"Unknown estimator strategy: {strategy!r} (expected one of {STRATEGIES})")
