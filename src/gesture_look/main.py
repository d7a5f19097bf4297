"""
Gesture Look - Main Application
================================

Desktop window showing the controlled view. Press G to start hand control;
moving the hand around the camera frame rotates the view.
"""

import cv2
import logging
import argparse
import signal
from functools import partial
from typing import Optional

from .capture.camera import Camera
from .control.controller import GestureController
from .control.sink import RotationSink
from .control.smoother import MotionSmoother
from .control.toggle import ToggleButton
from .control.view import ImageView, ViewChannel
from .detection.estimators import STRATEGY_LANDMARK, STRATEGY_PIXEL, create_estimator
from .utils.config import AppConfig, create_app_config, load_config
from .utils.logger import setup_logging
from .utils.visualization import Visualizer

logger = logging.getLogger(__name__)

KEY_ESC = 27


class GestureLookApp:
    """
    Wires camera, estimator, smoother, view and controller into a window.

    Keyboard:
    - g / space: enable or disable hand control
    - s: switch estimator strategy (while disabled)
    - p: print loop statistics
    - q / ESC: quit
    """

    def __init__(self, config: AppConfig):
        self.config = config

        channel = ViewChannel(config.view.channel) if config.view.channel.enabled else None
        self.view = ImageView(config.view, channel=channel)
        self.sink = RotationSink(self.view)
        self.camera = Camera(config.camera)
        self.controller = GestureController(
            camera=self.camera,
            sink=self.sink,
            estimator_factory=partial(
                create_estimator,
                pixel_config=config.pixel,
                detector_config=config.mediapipe,
            ),
            smoother=MotionSmoother(config.motion),
            config=config.controller,
            on_error=self._on_error,
        )
        self.toggle = ToggleButton(self.controller, on_change=self._on_toggle_label)
        self.visualizer = Visualizer()

        self.strategy = config.controller.strategy
        self._error: Optional[str] = None
        self._running = False

    def _on_error(self, message: str) -> None:
        self._error = message

    def _on_toggle_label(self, label: str) -> None:
        # Repaint right away so "Loading…" shows during camera startup
        if self._running:
            self._show()
            cv2.waitKey(1)

    def _show(self) -> None:
        image = self.view.render()
        self.visualizer.draw_status(image, self.sink.indicator)
        self.visualizer.draw_toggle(image, f"{self.toggle.label} ({self.strategy})")
        self.visualizer.draw_metrics(image, self.controller.stats.get_metrics(), self.controller.strategy)
        self.visualizer.draw_error(image, self._error)
        cv2.imshow(self.config.window_name, image)

    def run(self) -> None:
        """Run the display loop until quit."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self._running = True
        logger.info("Press G to toggle hand control, S to switch strategy, Q to quit")
        try:
            while self._running:
                # One frame per display refresh; no-op while inactive
                self.camera.pump()
                self._show()
                self._handle_key(cv2.waitKey(1) & 0xFF)
        finally:
            self.controller.stop()
            self.view.close()
            cv2.destroyAllWindows()

    def _handle_key(self, key: int) -> None:
        if key in (ord('q'), KEY_ESC):
            self._running = False
        elif key in (ord('g'), ord(' ')):
            self._error = None
            self.toggle.press(self.strategy)
        elif key == ord('s'):
            if self.controller.is_active:
                logger.info("Disable hand control before switching strategy")
                return
            self.strategy = STRATEGY_PIXEL if self.strategy == STRATEGY_LANDMARK else STRATEGY_LANDMARK
            logger.info(f"Estimator strategy: {self.strategy}")
        elif key == ord('p'):
            print(self.controller.stats.get_report())

    def _signal_handler(self, signum, frame) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self._running = False


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Hands-free view rotation from webcam hand tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keyboard Controls:
  g/SPACE   - Enable/disable hand control
  s         - Switch strategy (pixel / landmark) while disabled
  p         - Print loop statistics
  q/ESC     - Quit

Examples:
  gesture-look
  gesture-look --strategy pixel
  gesture-look --config custom_config.yaml --image room.jpg
        """
    )
    parser.add_argument("--config", "-c", default=None, help="Path to configuration file")
    parser.add_argument("--strategy", choices=[STRATEGY_LANDMARK, STRATEGY_PIXEL], default=None,
                        help="Hand position estimator")
    parser.add_argument("--camera", type=int, default=None, help="Camera device index")
    parser.add_argument("--image", default=None, help="Image shown in the controlled view")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    config_dict = load_config(args.config)
    app_config = create_app_config(config_dict)

    if args.strategy:
        app_config.controller.strategy = args.strategy
    if args.camera is not None:
        app_config.camera.device_id = args.camera
    if args.image:
        app_config.view.image_path = args.image

    setup_logging("DEBUG" if args.debug else app_config.log_level, app_config.log_file)

    app = GestureLookApp(app_config)
    app.run()


if __name__ == "__main__":
    main()
