"""
Gesture Look - Hands-free View Rotation
========================================

Maps the position of a hand seen by a webcam to a smoothed 2-axis
rotation of a controlled view.

Modules:
    - capture: Camera frame acquisition
    - detection: Hand position estimators (pixel heuristic, MediaPipe landmarks)
    - control: Motion smoothing, rotation sink, session controller
    - utils: Configuration, logging, loop statistics, overlays
"""

__version__ = "1.0.0"
__author__ = "HCI Team"
