"""
Motion Smoother
================

Exponential smoothing of the view rotation. Tracking a hand moves the
rotation a fixed fraction toward its target each frame; losing the hand
lets the rotation decay back toward center at a slower rate.
"""

from dataclasses import dataclass
from typing import Optional

from ..detection.estimators import NormalizedPosition


@dataclass
class MotionConfig:
    """Rotation mapping and smoothing settings."""
    max_rotation: float = 15.0   # degrees at the edge of the frame
    tracking_gain: float = 0.1   # fraction of the remaining distance per frame
    decay: float = 0.95          # per-frame factor while no hand is seen

    @classmethod
    def from_dict(cls, config: dict) -> "MotionConfig":
        """Create config from dictionary."""
        return cls(
            max_rotation=config.get("max_rotation", 15.0),
            tracking_gain=config.get("tracking_gain", 0.1),
            decay=config.get("decay", 0.95),
        )


@dataclass
class RotationState:
    """View rotation in degrees about the X (pitch) and Y (yaw) axes."""
    x: float = 0.0
    y: float = 0.0


def map_to_rotation(position: NormalizedPosition, max_rotation: float = 15.0) -> RotationState:
    """
    Map a normalized hand position to target rotation angles.

    The frame center maps to zero; the frame edges map to +/- max_rotation.
    """
    return RotationState(
        x=(0.5 - position.y) * max_rotation * 2,
        y=(position.x - 0.5) * max_rotation * 2,
    )


class MotionSmoother:
    """
    Holds the current rotation and advances it once per frame.

    Example:
        >>> smoother = MotionSmoother()
        >>> state = smoother.advance(NormalizedPosition(0.8, 0.2))  # ~(0.9, 0.9)
        >>> state = smoother.advance(None)  # decays toward (0, 0)
    """

    def __init__(self, config: Optional[MotionConfig] = None):
        self.config = config or MotionConfig()
        self._state = RotationState()

    @property
    def state(self) -> RotationState:
        return RotationState(self._state.x, self._state.y)

    def advance(self, position: Optional[NormalizedPosition]) -> RotationState:
        """Move toward the target for ``position``, or toward center if None."""
        state = self._state
        if position is None:
            state.x *= self.config.decay
            state.y *= self.config.decay
        else:
            target = map_to_rotation(position, self.config.max_rotation)
            state.x += (target.x - state.x) * self.config.tracking_gain
            state.y += (target.y - state.y) * self.config.tracking_gain
        return self.state

    def reset(self) -> None:
        """Return the rotation to center immediately."""
        self._state = RotationState()
