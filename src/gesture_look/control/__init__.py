"""Rotation smoothing, view output and session control."""
from .smoother import MotionConfig, MotionSmoother, RotationState, map_to_rotation
from .view import ChannelConfig, ImageView, ViewChannel, ViewConfig, ViewTransform
from .sink import IndicatorState, RotationSink, StatusIndicator
from .controller import ControllerConfig, ControllerState, GestureController
from .toggle import ToggleButton

__all__ = [
    "MotionConfig",
    "MotionSmoother",
    "RotationState",
    "map_to_rotation",
    "ChannelConfig",
    "ImageView",
    "ViewChannel",
    "ViewConfig",
    "ViewTransform",
    "IndicatorState",
    "RotationSink",
    "StatusIndicator",
    "ControllerConfig",
    "ControllerState",
    "GestureController",
    "ToggleButton",
]
