"""Hand position estimation."""
from .hand_detector import HandDetector, HandDetectorConfig, HandLandmarks
from .estimators import (
    HandEstimator,
    LandmarkEstimator,
    NormalizedPosition,
    PixelHeuristicConfig,
    PixelHeuristicEstimator,
    create_estimator,
)

__all__ = [
    "HandDetector",
    "HandDetectorConfig",
    "HandLandmarks",
    "HandEstimator",
    "LandmarkEstimator",
    "NormalizedPosition",
    "PixelHeuristicConfig",
    "PixelHeuristicEstimator",
    "create_estimator",
]
