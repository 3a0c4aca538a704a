"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from zentra_app.config.defaults import get_default_config, get_default_settings
from zentra_app.config.loader import ConfigLoader
from zentra_app.config.validation import ConfigValidator
from zentra_app.errors import ConfigurationError


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Empty config directory (no settings.yaml)."""
    return tmp_path


class TestDefaultConfig:
    """Test suite for default rule tables."""

    def test_default_config_creation(self) -> None:
        config = get_default_config()
        assert config.classifier.window_size == 10
        assert config.classifier.overextended_ratio == 0.33
        assert config.behavior.impulsive_gap_minutes == 30.0
        assert config.battery.impulsive_drain == 15
        assert config.breathwork.battery_trigger == 40

    def test_default_settings(self) -> None:
        settings = get_default_settings()
        assert settings.engine.state_window == 10
        assert settings.engine.insights_period == "MONTH"
        assert settings.logging.level == "INFO"


class TestConfigLoader:
    """Test suite for the settings loader."""

    def test_default_config_dir(self) -> None:
        loader = ConfigLoader.create()
        assert isinstance(loader.config_dir, Path)
        assert loader.config_dir.name == "config"

    def test_missing_file_uses_defaults(self, config_dir: Path) -> None:
        settings = ConfigLoader.create(config_dir).load_settings()
        assert settings == get_default_settings()

    def test_settings_file_overrides_defaults(self, config_dir: Path) -> None:
        (config_dir / "settings.yaml").write_text("engine:\n  state_window: 20\n")
        settings = ConfigLoader.create(config_dir).load_settings()
        assert settings.engine.state_window == 20
        assert settings.engine.history_limit == 50

    def test_explicit_overrides_win(self, config_dir: Path) -> None:
        (config_dir / "settings.yaml").write_text("engine:\n  state_window: 20\n")
        settings = ConfigLoader.create(config_dir).load_settings({"engine": {"state_window": 8}})
        assert settings.engine.state_window == 8

    def test_empty_file(self, config_dir: Path) -> None:
        (config_dir / "settings.yaml").write_text("")
        assert ConfigLoader.create(config_dir).load_settings() == get_default_settings()

    def test_non_mapping_file(self, config_dir: Path) -> None:
        (config_dir / "settings.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.create(config_dir).load_settings()
        assert exc_info.value.recoverable is False

    def test_invalid_override(self, config_dir: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.create(config_dir).load_settings({"engine": {"state_window": 0}})
        assert exc_info.value.source == "overrides"
        assert exc_info.value.errors[0].field == "state_window"

    def test_repository_settings_file_is_valid(self) -> None:
        settings = ConfigLoader.create().load_settings()
        assert settings.engine.trend_days == 7


class TestConfigValidator:
    """Test suite for settings validation."""

    def test_valid_settings(self) -> None:
        config = {"engine": {"state_window": 10, "insights_period": "WEEK"},
                  "logging": {"level": "debug", "format_json": True}}
        assert ConfigValidator.validate_settings(config) == []

    def test_unknown_section(self) -> None:
        errors = ConfigValidator.validate_settings({"scoring": {}})
        assert errors[0].message == "Unknown settings section"

    def test_unknown_key(self) -> None:
        errors = ConfigValidator.validate_settings({"engine": {"window": 3}})
        assert errors[0].field == "engine.window"

    @pytest.mark.parametrize("value", [0, -1, 2.5, True, "10"])
    def test_invalid_window(self, value) -> None:
        errors = ConfigValidator.validate_engine_settings({"state_window": value})
        assert len(errors) == 1
        assert errors[0].message == "Must be a positive integer"

    def test_invalid_period(self) -> None:
        errors = ConfigValidator.validate_engine_settings({"insights_period": "DAY"})
        assert errors[0].field == "insights_period"

    def test_invalid_logging(self) -> None:
        errors = ConfigValidator.validate_logging_settings({"level": "LOUD", "format_json": "yes"})
        assert [e.field for e in errors] == ["level", "format_json"]
