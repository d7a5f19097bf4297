"""
Logging setup for the application.

Application modules log under the ``gesture_look`` package logger; the
chatty native libraries underneath (MediaPipe, absl) are held at WARNING
unless debugging.
"""

import os
import logging
import logging.handlers

PACKAGE_LOGGER = "gesture_look"
THIRD_PARTY_LOGGERS = ("mediapipe", "absl", "urllib3")


def _level(value) -> int:
    return getattr(logging, str(value).upper(), logging.INFO)


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3, console_level=None):
    """
    Configure console logging and an optional rotating log file.

    Args:
        level: Level for the ``gesture_look`` loggers
        log_file: Path of the rotating log file, or None for console only
        console_level: Console threshold; defaults to ``level``

    Returns:
        The ``gesture_look`` package logger
    """
    package_level = _level(level)
    console_threshold = _level(console_level) if console_level else package_level

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else min(package_level, logging.WARNING))

    # Remove existing handlers
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(console_threshold)
    console.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)-7s] %(name)-36s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(package_level)

    noisy_level = logging.DEBUG if package_level <= logging.DEBUG else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return package_logger
