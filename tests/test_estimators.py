"""
Tests for Hand Position Estimators
===================================
"""

import pytest
import numpy as np
import sys
from pathlib import Path
from unittest.mock import patch

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gesture_look.capture.camera import Frame
from gesture_look.detection.estimators import (
    LandmarkEstimator,
    NormalizedPosition,
    PixelHeuristicConfig,
    PixelHeuristicEstimator,
    create_estimator,
    skin_mask,
)
from gesture_look.detection.hand_detector import HandDetector, HandLandmarks, Landmark
from gesture_look.errors import DetectorUnavailable

SKIN_BGR = (90, 120, 200)  # RGB (200, 120, 90)


def make_frame(image: np.ndarray, timestamp: float = 1.0) -> Frame:
    return Frame(image=image, timestamp=timestamp, frame_number=1)


def frame_with_samples(count: int, stride: int = 10) -> Frame:
    """640x480 black frame with ``count`` skin pixels on sampled positions."""
    image = np.zeros((480, 640, 3), dtype=np.uint8)
    flat = image.reshape(-1, 3)
    flat[np.arange(count) * stride] = SKIN_BGR
    return make_frame(image)


class TestSkinMask:
    """Test suite for the RGB skin rule."""

    def test_classification(self):
        rgb = np.array([
            [200, 120, 90],   # skin
            [90, 120, 200],   # blue
            [96, 41, 21],     # just inside every threshold
            [95, 60, 40],     # r not > 95
            [120, 118, 110],  # spread too small
            [150, 160, 100],  # g > r
            [255, 255, 255],  # white
        ], dtype=np.uint8)

        assert skin_mask(rgb).tolist() == [True, False, True, False, False, False, False]


class TestPixelHeuristicEstimator:
    """Test suite for the skin-colour centroid estimator."""

    @pytest.fixture
    def estimator(self):
        est = PixelHeuristicEstimator(PixelHeuristicConfig())
        est.open()
        yield est
        est.close()

    def test_too_few_samples_is_absent(self, estimator):
        assert estimator.estimate(frame_with_samples(50)) is None

    def test_threshold_boundary(self, estimator):
        assert estimator.estimate(frame_with_samples(99)) is None
        assert estimator.estimate(frame_with_samples(100)) is not None

    def test_empty_frame_is_absent(self, estimator):
        image = np.zeros((480, 640, 3), dtype=np.uint8)
        assert estimator.estimate(make_frame(image)) is None

    def test_centroid_of_skin_region(self, estimator):
        image = np.zeros((480, 640, 3), dtype=np.uint8)
        image[200:280, 480:640] = SKIN_BGR

        position = estimator.estimate(make_frame(image))

        # Sampled columns are 480, 490, ..., 630
        assert position.x == pytest.approx(555 / 640)
        assert position.y == pytest.approx(239.5 / 480)

    def test_frame_scaled_to_canvas(self, estimator):
        image = np.zeros((240, 320, 3), dtype=np.uint8)
        image[:, 160:] = SKIN_BGR

        position = estimator.estimate(make_frame(image))

        assert 0.7 < position.x < 0.8
        assert position.y == pytest.approx(0.5, abs=0.02)

    def test_estimate_without_open(self):
        est = PixelHeuristicEstimator()
        image = np.zeros((480, 640, 3), dtype=np.uint8)
        image[:, :320] = SKIN_BGR

        position = est.estimate(make_frame(image))

        assert position.x < 0.5


class FakeDetector:
    """Stands in for HandDetector; pushes scripted results to listeners."""

    def __init__(self, results=None, start_ok=True):
        self.results = list(results or [])
        self.start_ok = start_ok
        self.listeners = []
        self.sent = []
        self.stopped = False

    def start(self):
        return self.start_ok

    def stop(self):
        self.stopped = True
        self.listeners.clear()

    def on_results(self, listener):
        self.listeners.append(listener)

    def send(self, image, timestamp_ms=None):
        self.sent.append(timestamp_ms)
        if not self.results:
            return
        hands = self.results.pop(0)
        if hands is None:
            return
        for listener in self.listeners:
            listener(hands)


def hand_at(x: float, y: float) -> HandLandmarks:
    landmarks = [Landmark(x=x, y=y, z=0.0)] + [Landmark(0.0, 0.0, 0.0)] * 20
    return HandLandmarks(landmarks=landmarks, handedness="Right", confidence=0.9)


class TestLandmarkEstimator:
    """Test suite for the MediaPipe wrist estimator."""

    def test_wrist_position(self):
        estimator = LandmarkEstimator(FakeDetector([[hand_at(0.3, 0.6), hand_at(0.9, 0.9)]]))
        estimator.open()

        position = estimator.estimate(frame_with_samples(0))

        assert position == NormalizedPosition(0.3, 0.6)

    def test_no_hand_is_absent(self):
        estimator = LandmarkEstimator(FakeDetector([[]]))
        estimator.open()

        assert estimator.estimate(frame_with_samples(0)) is None

    def test_stale_result_not_reused(self):
        # Second frame produces no callback at all
        estimator = LandmarkEstimator(FakeDetector([[hand_at(0.5, 0.5)], None]))
        estimator.open()

        assert estimator.estimate(frame_with_samples(0)) is not None
        assert estimator.estimate(frame_with_samples(0)) is None

    def test_frame_timestamp_forwarded(self):
        detector = FakeDetector([[]])
        estimator = LandmarkEstimator(detector)
        estimator.open()

        estimator.estimate(make_frame(np.zeros((10, 10, 3), dtype=np.uint8), timestamp=2.5))

        assert detector.sent == [2500]

    def test_unavailable_detector(self):
        estimator = LandmarkEstimator(FakeDetector(start_ok=False))

        with pytest.raises(DetectorUnavailable):
            estimator.open()

    def test_close_stops_detector(self):
        detector = FakeDetector()
        estimator = LandmarkEstimator(detector)
        estimator.open()

        estimator.close()

        assert detector.stopped
        assert detector.listeners == []


class TestHandDetector:
    """Test suite for HandDetector without a loaded model."""

    def test_detect_before_start(self):
        detector = HandDetector()

        assert detector.detect(np.zeros((48, 64, 3), dtype=np.uint8)) == []
        assert not detector.is_running

    def test_send_notifies_listeners(self):
        detector = HandDetector()
        calls = []
        detector.on_results(calls.append)

        detector.send(np.zeros((48, 64, 3), dtype=np.uint8))

        assert calls == [[]]

    def test_model_downloaded_under_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with patch("gesture_look.detection.hand_detector.download_model", return_value=False) as download:
            assert HandDetector().start() is False

        saved_to = download.call_args[0][1]
        assert saved_to == Path("models") / "hand_landmarker.task"
        assert not saved_to.is_absolute()

    def test_stop_drops_listeners(self):
        detector = HandDetector()
        calls = []
        detector.on_results(calls.append)

        detector.stop()
        detector.send(np.zeros((48, 64, 3), dtype=np.uint8))

        assert calls == []


class TestCreateEstimator:
    """Test suite for strategy selection."""

    def test_pixel(self):
        assert isinstance(create_estimator("pixel"), PixelHeuristicEstimator)

    def test_landmark(self):
        estimator = create_estimator("landmark")
        assert isinstance(estimator, LandmarkEstimator)
        assert estimator.name == "landmark"

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_estimator("thermal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
