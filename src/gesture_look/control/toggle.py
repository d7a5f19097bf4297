"""On/off control for the hand control session."""

import logging
from typing import Callable, Optional

from .controller import GestureController

logger = logging.getLogger(__name__)

LABEL_ENABLE = "Enable Hand Control"
LABEL_DISABLE = "Disable Hand Control"
LABEL_LOADING = "Loading…"


class ToggleButton:
    """
    Single button driving ``start()`` / ``stop()``.

    ``on_change`` is called with each new label, so a UI can repaint
    "Loading…" before the blocking camera acquisition begins.
    """

    def __init__(
        self,
        controller: GestureController,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self.controller = controller
        self.on_change = on_change
        self.label = LABEL_DISABLE if controller.is_active else LABEL_ENABLE

    def _set_label(self, label: str) -> None:
        self.label = label
        if self.on_change is not None:
            self.on_change(label)

    def press(self, strategy: Optional[str] = None) -> None:
        if self.controller.is_active:
            self.controller.stop()
            self._set_label(LABEL_ENABLE)
            return

        self._set_label(LABEL_LOADING)
        started = self.controller.start(strategy)
        self._set_label(LABEL_DISABLE if started else LABEL_ENABLE)
