"""
Gesture Controller
===================

Owns the hand control session: acquires the camera, picks an estimator,
runs the per-frame estimate -> smooth -> apply step, and tears everything
down again on stop.

State machine:
    IDLE --start()--> STARTING --(camera + estimator ready)--> ACTIVE
    STARTING --(failure)--> IDLE
    ACTIVE --stop()--> IDLE
"""

import logging
import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..capture.camera import Camera, CaptureConstraints, Frame
from ..detection.estimators import (
    STRATEGIES,
    STRATEGY_LANDMARK,
    STRATEGY_PIXEL,
    HandEstimator,
)
from ..errors import AcquisitionError, DetectorUnavailable
from ..utils.performance import LoopStats
from .sink import RotationSink
from .smoother import MotionSmoother

logger = logging.getLogger(__name__)

ACQUISITION_HELP = (
    "Could not start the camera: {error}\n\n"
    "Please make sure that:\n"
    "1. Camera access is allowed for this application\n"
    "2. A camera is connected and not in use by another program\n"
    "3. Network video sources use a secure connection"
)

DETECTOR_HELP = (
    "Hand landmark detection is unavailable: {error}\n\n"
    "Check the network connection for the model download, or switch to "
    "the pixel strategy."
)


class ControllerState(Enum):
    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"


@dataclass
class ControllerConfig:
    """Session settings."""
    strategy: str = STRATEGY_LANDMARK
    fallback_to_heuristic: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "ControllerConfig":
        """Create config from dictionary."""
        return cls(
            strategy=config.get("strategy", STRATEGY_LANDMARK),
            fallback_to_heuristic=config.get("fallback_to_heuristic", False),
        )


@dataclass
class Session:
    """Resources owned by one active hand control session."""
    session_id: int
    camera: Camera
    estimator: HandEstimator


class GestureController:
    """
    Hand control lifecycle and per-frame loop.

    The camera invokes ``_on_frame`` synchronously from ``Camera.pump()``,
    so all state changes happen on the caller's thread.

    Example:
        >>> controller = GestureController(camera, sink, create_estimator)
        >>> if controller.start("pixel"):
        ...     while controller.is_active:
        ...         camera.pump()
        >>> controller.stop()
    """

    def __init__(
        self,
        camera: Camera,
        sink: RotationSink,
        estimator_factory: Callable[[str], HandEstimator],
        smoother: Optional[MotionSmoother] = None,
        config: Optional[ControllerConfig] = None,
        constraints: Optional[CaptureConstraints] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        self.camera = camera
        self.sink = sink
        self.smoother = smoother or MotionSmoother()
        self.config = config or ControllerConfig()
        self.constraints = constraints or camera.config.constraints
        self.stats = LoopStats()
        self.last_error: Optional[str] = None

        self._estimator_factory = estimator_factory
        self._on_error = on_error
        self._state = ControllerState.IDLE
        self._session: Optional[Session] = None
        self._session_ids = itertools.count(1)

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is ControllerState.ACTIVE

    @property
    def strategy(self) -> Optional[str]:
        """Strategy of the running session, if any."""
        return self._session.estimator.name if self._session else None

    def start(self, strategy: Optional[str] = None) -> bool:
        """
        Start a hand control session.

        Args:
            strategy: "pixel" or "landmark"; defaults to the configured one

        Returns:
            True if the session is active, False if start failed or was ignored
        """
        if self._state is not ControllerState.IDLE:
            logger.debug(f"start() ignored while {self._state.value}")
            return False

        strategy = strategy or self.config.strategy
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown estimator strategy: {strategy!r}")

        self._state = ControllerState.STARTING
        self.last_error = None
        logger.info(f"Starting hand control ({strategy})...")

        try:
            self.camera.acquire(self.constraints)
        except AcquisitionError as e:
            logger.error(f"Camera acquisition failed: {e}")
            self._fail(ACQUISITION_HELP.format(error=e))
            return False
        except Exception:
            self.camera.release()
            self._state = ControllerState.IDLE
            raise

        try:
            estimator = self._open_estimator(strategy)
        except DetectorUnavailable as e:
            logger.error(f"Detector unavailable: {e}")
            self.camera.release()
            self._fail(DETECTOR_HELP.format(error=e))
            return False
        except Exception:
            self.camera.release()
            self._state = ControllerState.IDLE
            raise

        session = Session(next(self._session_ids), self.camera, estimator)
        self._session = session
        self.stats.reset()
        self.sink.activate()
        self.camera.attach_frame_loop(lambda frame: self._on_frame(session, frame))
        self._state = ControllerState.ACTIVE
        logger.info(f"Hand control started (session {session.session_id}, {estimator.name})")
        return True

    def _open_estimator(self, strategy: str) -> HandEstimator:
        estimator = self._estimator_factory(strategy)
        try:
            estimator.open()
            return estimator
        except DetectorUnavailable:
            estimator.close()
            if strategy != STRATEGY_LANDMARK or not self.config.fallback_to_heuristic:
                raise
        logger.warning("Landmark detector unavailable, falling back to pixel heuristic")
        estimator = self._estimator_factory(STRATEGY_PIXEL)
        estimator.open()
        return estimator

    def _fail(self, message: str) -> None:
        self._state = ControllerState.IDLE
        self.last_error = message
        if self._on_error is not None:
            self._on_error(message)

    def _on_frame(self, session: Session, frame: Frame) -> None:
        # Frames for a torn-down session are dropped
        if session is not self._session or self._state is not ControllerState.ACTIVE:
            logger.debug(f"Dropping frame {frame.frame_number} for inactive session")
            return

        try:
            with self.stats.measure("estimate"):
                position = session.estimator.estimate(frame)
            with self.stats.measure("smooth"):
                rotation = self.smoother.advance(position)
            with self.stats.measure("apply"):
                self.sink.apply(rotation, detected=position is not None)
        except Exception as e:
            self.stats.frame_failed()
            logger.error(f"Error in hand control frame {frame.frame_number}: {e}")
            return

        self.stats.frame_complete(detected=position is not None)

    def stop(self) -> None:
        """Stop the session and release all resources. Safe to repeat."""
        if self._state is ControllerState.IDLE:
            return

        logger.info("Stopping hand control...")
        session, self._session = self._session, None
        self._state = ControllerState.IDLE

        # Remove the frame callback before the device goes away
        self.camera.detach_frame_loop()
        self.camera.release()
        if session is not None:
            session.estimator.close()

        self.smoother.reset()
        self.sink.reset()
        logger.info("Hand control stopped")

    def toggle(self, strategy: Optional[str] = None) -> bool:
        """Stop if running, start otherwise. Returns True if now active."""
        if self._state is ControllerState.IDLE:
            return self.start(strategy)
        self.stop()
        return False
