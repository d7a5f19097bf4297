"""
Hand Detection Module - MediaPipe Tasks API
============================================

Wraps the MediaPipe HandLandmarker. Frames are pushed with ``send()`` and
results are delivered to the listeners registered with ``on_results()``.
"""

import numpy as np
import logging
import urllib.request
from dataclasses import dataclass
from typing import Callable, List, Optional, NamedTuple
from enum import IntEnum
from pathlib import Path

import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

logger = logging.getLogger(__name__)

# Model download URL
HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
# Downloaded on first use, relative to the working directory
DEFAULT_MODEL_PATH = Path("models") / "hand_landmarker.task"


class LandmarkIndex(IntEnum):
    """Hand landmark indices used by the controller."""
    WRIST = 0


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height
    z: float  # Depth relative to wrist


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    max_num_hands: int = 1
    model_complexity: int = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    running_mode: str = "VIDEO"  # IMAGE or VIDEO

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            max_num_hands=d.get("max_num_hands", 1),
            model_complexity=d.get("model_complexity", 1),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            running_mode=d.get("running_mode", "VIDEO"),
        )


@dataclass
class HandLandmarks:
    """Landmarks of one detected hand."""
    landmarks: List[Landmark]
    handedness: str  # "Left" or "Right"
    confidence: float

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]


ResultsListener = Callable[[List[HandLandmarks]], None]


def download_model(url: str, save_path: Path) -> bool:
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        logger.info(f"Model already exists at {save_path}")
        return True

    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading hand landmarker model to {save_path}...")
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete!")
        return True
    except OSError as e:
        logger.error(f"Failed to download model: {e}")
        return False


class HandDetector:
    """
    Hand landmark detector using MediaPipe Tasks API (HandLandmarker).

    The Tasks API ships a single full-size hand model, which corresponds to
    ``model_complexity=1`` of the legacy solution.

    Example:
        >>> detector = HandDetector(HandDetectorConfig())
        >>> detector.on_results(lambda hands: print(len(hands)))
        >>> detector.start()
        >>> detector.send(rgb_image)
        >>> detector.stop()
    """

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._listeners: List[ResultsListener] = []
        self._last_timestamp_ms = 0

    def start(self) -> bool:
        """Initialize the hand landmarker."""
        if self.config.model_complexity != 1:
            logger.warning(
                f"model_complexity={self.config.model_complexity} not available "
                "with the Tasks API, using the full model"
            )
        try:
            model_path = self.config.model_path or str(DEFAULT_MODEL_PATH)

            if not Path(model_path).exists():
                if not download_model(HAND_LANDMARKER_MODEL_URL, Path(model_path)):
                    logger.error("Could not download hand landmarker model")
                    return False

            if self.config.running_mode == "IMAGE":
                running_mode = vision.RunningMode.IMAGE
            else:
                running_mode = vision.RunningMode.VIDEO

            base_options = python.BaseOptions(model_asset_path=model_path)
            options = vision.HandLandmarkerOptions(
                base_options=base_options,
                running_mode=running_mode,
                num_hands=self.config.max_num_hands,
                min_hand_detection_confidence=self.config.min_detection_confidence,
                min_hand_presence_confidence=self.config.min_presence_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence,
            )
            self._landmarker = vision.HandLandmarker.create_from_options(options)
            self._last_timestamp_ms = 0

            logger.info(f"HandLandmarker initialized with model: {model_path}")
            logger.info(f"Running mode: {self.config.running_mode}, Max hands: {self.config.max_num_hands}")
            return True

        except (RuntimeError, ValueError, OSError) as e:
            logger.error(f"Failed to initialize HandLandmarker: {e}")
            return False

    def stop(self) -> None:
        """Release resources and drop listeners."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker stopped")
        self._listeners.clear()

    @property
    def is_running(self) -> bool:
        return self._landmarker is not None

    def on_results(self, listener: ResultsListener) -> None:
        """Register a listener called with the hands found in each sent frame."""
        self._listeners.append(listener)

    def send(self, image: np.ndarray, timestamp_ms: Optional[int] = None) -> None:
        """Detect hands in an RGB image and notify listeners."""
        hands = self.detect(image, timestamp_ms)
        for listener in list(self._listeners):
            listener(hands)

    def detect(self, image: np.ndarray, timestamp_ms: Optional[int] = None) -> List[HandLandmarks]:
        """
        Detect hands in the given image.

        Args:
            image: RGB image as numpy array (H, W, 3)
            timestamp_ms: Frame timestamp in milliseconds (VIDEO mode)

        Returns:
            List of HandLandmarks for each detected hand
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return []

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(image))

        if self.config.running_mode == "IMAGE":
            result = self._landmarker.detect(mp_image)
        else:
            # VIDEO mode requires strictly increasing timestamps
            if timestamp_ms is None:
                timestamp_ms = self._last_timestamp_ms + 33  # ~30 FPS
            timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
            self._last_timestamp_ms = timestamp_ms
            result = self._landmarker.detect_for_video(mp_image, timestamp_ms)

        hands = []
        for i, hand_landmarks in enumerate(result.hand_landmarks):
            handedness = "Right"
            confidence = 0.0
            if result.handedness and len(result.handedness) > i:
                handedness = result.handedness[i][0].category_name
                confidence = result.handedness[i][0].score

            hands.append(HandLandmarks(
                landmarks=[Landmark(x=lm.x, y=lm.y, z=lm.z) for lm in hand_landmarks],
                handedness=handedness,
                confidence=confidence,
            ))

        return hands

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
