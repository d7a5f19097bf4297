"""
Visualization Module
=====================

Overlays drawn on the controlled view window: status badge, toggle
label, error message and loop statistics.
"""

import cv2
import numpy as np
from typing import List, Optional

from ..control.sink import StatusIndicator
from ..utils.performance import LoopMetrics

TEXT_COLOR = (255, 255, 255)
WARNING_COLOR = (0, 0, 255)  # Red (BGR)


class Visualizer:
    """
    Draws UI overlays onto a rendered view frame.

    Example:
        >>> viz = Visualizer()
        >>> image = view.render()
        >>> viz.draw_status(image, sink.indicator)
        >>> viz.draw_toggle(image, toggle.label)
        >>> cv2.imshow("Gesture Look", image)
    """

    def __init__(self, font_scale: float = 0.6, font_thickness: int = 2):
        self.font_scale = font_scale
        self.font_thickness = font_thickness
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    def draw_status(self, image: np.ndarray, indicator: StatusIndicator) -> np.ndarray:
        """Draw the status badge in the top-right corner (nothing when hidden)."""
        if not indicator.visible:
            return image

        height, width = image.shape[:2]
        text = indicator.text
        (tw, th), baseline = cv2.getTextSize(text, self._font, self.font_scale, self.font_thickness)
        x1, y1 = width - tw - 30, 15
        x2, y2 = width - 10, 15 + th + baseline + 16

        # Translucent fill with a solid border
        overlay = image.copy()
        cv2.rectangle(overlay, (x1, y1), (x2, y2), indicator.color, -1)
        cv2.addWeighted(overlay, 0.3, image, 0.7, 0, dst=image)
        cv2.rectangle(image, (x1, y1), (x2, y2), indicator.color, 2)
        cv2.putText(image, text, (x1 + 10, y2 - baseline - 8),
                    self._font, self.font_scale, TEXT_COLOR, self.font_thickness)
        return image

    def draw_toggle(self, image: np.ndarray, label: str, hint: str = "[G]") -> np.ndarray:
        """Draw the toggle button label in the bottom-left corner."""
        height = image.shape[0]
        text = f"{hint} {label}"
        (tw, th), baseline = cv2.getTextSize(text, self._font, self.font_scale, self.font_thickness)
        cv2.rectangle(image, (10, height - th - baseline - 30), (tw + 30, height - 10), (40, 40, 40), -1)
        cv2.putText(image, text, (20, height - baseline - 20),
                    self._font, self.font_scale, TEXT_COLOR, self.font_thickness)
        return image

    def draw_error(self, image: np.ndarray, message: Optional[str]) -> np.ndarray:
        """Draw a multi-line error message centered on the image."""
        if not message:
            return image

        lines: List[str] = message.splitlines()
        height, width = image.shape[:2]
        line_height = 24
        y = (height - len(lines) * line_height) // 2
        for line in lines:
            tw = cv2.getTextSize(line, self._font, 0.55, 1)[0][0]
            x = max(10, (width - tw) // 2)
            # Draw shadow
            cv2.putText(image, line, (x + 1, y + 1), self._font, 0.55, (0, 0, 0), 3)
            cv2.putText(image, line, (x, y), self._font, 0.55, WARNING_COLOR, 1)
            y += line_height
        return image

    def draw_metrics(self, image: np.ndarray, metrics: LoopMetrics, strategy: Optional[str]) -> np.ndarray:
        """Draw fps and estimator timing in the top-left corner."""
        x, y = 20, 30
        lines = [
            f"FPS: {metrics.fps:.1f}",
            f"Estimate: {metrics.estimate_ms:.1f}ms",
        ]
        if strategy:
            lines.append(f"Strategy: {strategy}")
        if metrics.frame_errors:
            lines.append(f"Frame errors: {metrics.frame_errors}")

        for line in lines:
            cv2.putText(image, line, (x, y), self._font, 0.5, TEXT_COLOR, 1)
            y += 20
        return image
