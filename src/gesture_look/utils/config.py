"""
Configuration loading.

Reads the YAML config, merges it over the built-in defaults, warns about
fields with the wrong type and builds the typed per-component configs.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import yaml

from ..capture.camera import CameraConfig
from ..control.controller import ControllerConfig
from ..control.smoother import MotionConfig
from ..control.view import ViewConfig
from ..detection.estimators import STRATEGIES, PixelHeuristicConfig
from ..detection.hand_detector import HandDetectorConfig

logger = logging.getLogger(__name__)

# Relative to the working directory
DEFAULT_CONFIG_PATH = Path("config") / "config.yaml"

DEFAULTS = {
    "camera": {
        "device_id": 0,
        "width": 640,
        "height": 480,
        "facing_mode": "user",
        "fps": 30,
    },
    "controller": {
        "strategy": "landmark",
        "fallback_to_heuristic": False,
    },
    "mediapipe": {
        "max_num_hands": 1,
        "model_complexity": 1,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
    },
    "pixel": {
        "sample_stride": 10,
        "min_samples": 100,
    },
    "motion": {
        "max_rotation": 15.0,
        "tracking_gain": 0.1,
        "decay": 0.95,
    },
    "view": {
        "perspective": 1000.0,
        "transition_ms": 100.0,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}

# Schema: sections and the expected types of their fields
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "facing_mode": str,
        "fps": int,
    },
    "controller": {
        "strategy": str,
        "fallback_to_heuristic": bool,
    },
    "mediapipe": {
        "max_num_hands": int,
        "model_complexity": int,
        "min_detection_confidence": float,
        "min_tracking_confidence": float,
    },
    "pixel": {
        "sample_stride": int,
        "min_samples": int,
    },
    "motion": {
        "max_rotation": float,
        "tracking_gain": float,
        "decay": float,
    },
    "view": {
        "perspective": float,
        "transition_ms": float,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(data: dict) -> List[str]:
    """Check known fields against the schema. Returns the warnings logged."""
    warnings = []
    for section_name, fields in _CONFIG_SCHEMA.items():
        section = data.get(section_name)
        if section is None:
            continue
        if not isinstance(section, dict):
            warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
            continue
        for field_name, expected_type in fields.items():
            if field_name not in section:
                continue
            value = section[field_name]
            if isinstance(value, bool) and expected_type is not bool:
                valid = False
            elif expected_type is float:
                # Allow int where float is expected
                valid = isinstance(value, (int, float))
            else:
                valid = isinstance(value, expected_type)
            if valid:
                continue
            warnings.append(
                f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                f"got {type(value).__name__} ({value!r})"
            )

    strategy = data.get("controller", {}).get("strategy")
    if strategy is not None and strategy not in STRATEGIES:
        warnings.append(f"controller.strategy: expected one of {STRATEGIES}, got {strategy!r}")

    for w in warnings:
        logger.warning("Config validation: %s", w)
    if not warnings:
        logger.debug("Config validation passed")
    return warnings


def load_config(config_path: Optional[Union[str, Path]] = None) -> dict:
    """Load configuration from YAML file, merged over the defaults."""
    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded config from %s", config_path)
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)
        data = {}

    merged = _deep_merge(DEFAULTS, data)
    validate_config(merged)
    return merged


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    mediapipe: HandDetectorConfig = field(default_factory=HandDetectorConfig)
    pixel: PixelHeuristicConfig = field(default_factory=PixelHeuristicConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    window_name: str = "Gesture Look"


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from configuration dictionary."""
    log = config_dict.get("logging", {}) or {}
    return AppConfig(
        camera=CameraConfig.from_dict(config_dict.get("camera", {})),
        controller=ControllerConfig.from_dict(config_dict.get("controller", {})),
        mediapipe=HandDetectorConfig.from_dict(config_dict.get("mediapipe", {})),
        pixel=PixelHeuristicConfig.from_dict(config_dict.get("pixel", {})),
        motion=MotionConfig.from_dict(config_dict.get("motion", {})),
        view=ViewConfig.from_dict(config_dict.get("view", {})),
        log_level=log.get("level", "INFO"),
        log_file=log.get("file"),
        window_name=config_dict.get("ui", {}).get("window_name", "Gesture Look"),
    )
