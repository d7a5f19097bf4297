"""
Tests for Configuration Loading
================================
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gesture_look.utils.config import (
    create_app_config,
    load_config,
    validate_config,
)

SHIPPED_CONFIG = Path(__file__).parent.parent / "config" / "config.yaml"


class TestLoadConfig:
    """Test suite for load_config."""

    def test_shipped_config(self):
        config = load_config(SHIPPED_CONFIG)

        assert config["controller"]["strategy"] == "landmark"
        assert config["motion"]["decay"] == 0.95
        assert validate_config(config) == []

    def test_default_path_is_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text("motion:\n  decay: 0.9\n")
        monkeypatch.chdir(tmp_path)

        assert load_config()["motion"]["decay"] == 0.9

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")

        assert config["camera"]["width"] == 640
        assert config["pixel"]["min_samples"] == 100

    def test_partial_override(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("motion:\n  tracking_gain: 0.2\ncontroller:\n  strategy: pixel\n")

        config = load_config(path)

        assert config["motion"]["tracking_gain"] == 0.2
        assert config["motion"]["decay"] == 0.95
        assert config["controller"]["strategy"] == "pixel"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path)["view"]["perspective"] == 1000.0


class TestValidateConfig:
    """Test suite for validate_config."""

    def test_int_accepted_for_float(self):
        assert validate_config({"motion": {"max_rotation": 15}}) == []

    def test_bool_rejected_for_int(self):
        warnings = validate_config({"camera": {"width": True}})

        assert len(warnings) == 1
        assert "camera.width" in warnings[0]

    def test_wrong_type(self):
        warnings = validate_config({"motion": {"decay": "fast"}})

        assert warnings and "motion.decay" in warnings[0]

    def test_section_not_a_dict(self):
        assert validate_config({"pixel": [1, 2]})

    def test_unknown_strategy(self):
        warnings = validate_config({"controller": {"strategy": "thermal"}})

        assert any("controller.strategy" in w for w in warnings)


class TestCreateAppConfig:
    """Test suite for create_app_config."""

    def test_from_loaded_config(self):
        app = create_app_config(load_config(SHIPPED_CONFIG))

        assert app.camera.width == 640
        assert app.controller.fallback_to_heuristic is False
        assert app.pixel.sample_stride == 10
        assert app.motion.max_rotation == 15.0
        assert app.view.channel.port == 9870
        assert app.log_level == "INFO"
        assert app.window_name == "Gesture Look"

    def test_empty_dict(self):
        app = create_app_config({})

        assert app.controller.strategy == "landmark"
        assert app.mediapipe.max_num_hands == 1
        assert app.log_file is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
