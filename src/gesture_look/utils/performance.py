"""
Loop Statistics
================

Frame rate, per-stage timing and per-frame error counts for the hand
control loop.
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional, Dict
from collections import deque
from contextlib import contextmanager

logger = logging.getLogger(__name__)

STAGES = ("estimate", "smooth", "apply")


@dataclass
class LoopMetrics:
    """Snapshot of loop statistics."""
    fps: float = 0.0
    estimate_ms: float = 0.0
    smooth_ms: float = 0.0
    apply_ms: float = 0.0
    total_frames: int = 0
    detected_frames: int = 0
    frame_errors: int = 0


class LoopStats:
    """
    Rolling statistics for the per-frame control loop.

    Example:
        >>> stats = LoopStats()
        >>> with stats.measure("estimate"):
        ...     position = estimator.estimate(frame)
        >>> stats.frame_complete(detected=position is not None)
    """

    def __init__(self, window_size: int = 30):
        self.window_size = window_size
        self._frame_stamps: deque = deque(maxlen=window_size)
        self._stage_times: Dict[str, deque] = {}
        self.total_frames = 0
        self.detected_frames = 0
        self.frame_errors = 0

    def reset(self) -> None:
        self._frame_stamps.clear()
        self._stage_times.clear()
        self.total_frames = 0
        self.detected_frames = 0
        self.frame_errors = 0

    @contextmanager
    def measure(self, stage: str):
        """Context manager to time one stage of the frame step."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            if stage not in self._stage_times:
                self._stage_times[stage] = deque(maxlen=self.window_size)
            self._stage_times[stage].append(elapsed)

    def frame_complete(self, detected: bool, now: Optional[float] = None) -> None:
        self._frame_stamps.append(time.perf_counter() if now is None else now)
        self.total_frames += 1
        if detected:
            self.detected_frames += 1

    def frame_failed(self) -> None:
        self.frame_errors += 1

    @property
    def fps(self) -> float:
        """Frame rate over the rolling window."""
        if len(self._frame_stamps) < 2:
            return 0.0
        span = self._frame_stamps[-1] - self._frame_stamps[0]
        return (len(self._frame_stamps) - 1) / span if span > 0 else 0.0

    def stage_time_ms(self, stage: str) -> float:
        """Average time for a stage in milliseconds."""
        times = self._stage_times.get(stage)
        if not times:
            return 0.0
        return (sum(times) / len(times)) * 1000

    def get_metrics(self) -> LoopMetrics:
        return LoopMetrics(
            fps=self.fps,
            estimate_ms=self.stage_time_ms("estimate"),
            smooth_ms=self.stage_time_ms("smooth"),
            apply_ms=self.stage_time_ms("apply"),
            total_frames=self.total_frames,
            detected_frames=self.detected_frames,
            frame_errors=self.frame_errors,
        )

    def get_report(self) -> str:
        """Formatted statistics report."""
        m = self.get_metrics()
        detect_rate = 100 * m.detected_frames / max(1, m.total_frames)
        return (
            f"Hand Control Loop\n"
            f"{'=' * 40}\n"
            f"FPS: {m.fps:.1f}\n"
            f"\nPer-Stage Breakdown:\n"
            f"  Estimate: {m.estimate_ms:.2f}ms\n"
            f"  Smooth: {m.smooth_ms:.3f}ms\n"
            f"  Apply: {m.apply_ms:.3f}ms\n"
            f"\nFrame Stats:\n"
            f"  Total: {m.total_frames}\n"
            f"  Hand detected: {m.detected_frames} ({detect_rate:.1f}%)\n"
            f"  Errors: {m.frame_errors}\n"
        )
