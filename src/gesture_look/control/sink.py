"""
Rotation Sink
==============

Pushes smoothed rotations to the controlled view and keeps the on-screen
status indicator in step with the latest detection result.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from .smoother import RotationState
from .view import ImageView, ViewTransform

logger = logging.getLogger(__name__)


class IndicatorState(Enum):
    HIDDEN = "hidden"
    DETECTED = "detected"
    SEARCHING = "searching"


class StatusIndicator:
    """Two visible states (hand detected / searching) plus hidden."""

    LABELS = {
        IndicatorState.DETECTED: "Hand detected",
        IndicatorState.SEARCHING: "Searching for hand...",
    }
    # Colors (BGR format)
    COLORS = {
        IndicatorState.DETECTED: (0, 255, 0),    # Green
        IndicatorState.SEARCHING: (0, 255, 255),  # Yellow
    }

    def __init__(self):
        self.state = IndicatorState.HIDDEN

    @property
    def visible(self) -> bool:
        return self.state is not IndicatorState.HIDDEN

    @property
    def text(self) -> str:
        return self.LABELS.get(self.state, "")

    @property
    def color(self) -> Optional[Tuple[int, int, int]]:
        return self.COLORS.get(self.state)

    def show_detected(self) -> None:
        self.state = IndicatorState.DETECTED

    def show_searching(self) -> None:
        self.state = IndicatorState.SEARCHING

    def hide(self) -> None:
        self.state = IndicatorState.HIDDEN


class RotationSink:
    """
    Applies rotation to the view and the status indicator.

    Example:
        >>> sink = RotationSink(ImageView())
        >>> sink.activate()
        >>> sink.apply(RotationState(2.0, -1.5), detected=True)
        >>> sink.reset()
    """

    MESSAGE_TYPE = "handControl"

    def __init__(self, view: ImageView, indicator: Optional[StatusIndicator] = None):
        self.view = view
        self.indicator = indicator or StatusIndicator()
        self.last_state: Optional[RotationState] = None

    def activate(self) -> None:
        """Show the indicator at session start, before any frame arrives."""
        self.indicator.show_searching()

    def apply(self, state: RotationState, detected: bool) -> None:
        self.view.set_transform(ViewTransform(
            rotation_x=state.x,
            rotation_y=state.y,
            perspective=self.view.config.perspective,
        ))
        self.last_state = state

        if detected:
            self.indicator.show_detected()
            # Best effort; the external viewer may not be listening
            self.view.post_message({
                "type": self.MESSAGE_TYPE,
                "rotationX": state.x,
                "rotationY": state.y,
            })
        else:
            self.indicator.show_searching()

    def reset(self) -> None:
        """Clear the transform and hide the indicator."""
        self.view.set_transform(None)
        self.indicator.hide()
        self.last_state = None
