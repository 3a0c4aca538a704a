"""Tests for logging configuration and score logging helpers."""

from unittest.mock import Mock

import pytest
import structlog

from zentra_app.logging import configure_logging, get_logger, get_scoring_logger, log_score_result


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Test structlog configuration."""

    @pytest.mark.parametrize("format_json", [True, False])
    def test_configures_renderer(self, reset_structlog, format_json):
        configure_logging(level="DEBUG", format_json=format_json)
        renderer = structlog.get_config()["processors"][-1]
        expected = structlog.processors.JSONRenderer if format_json else structlog.dev.ConsoleRenderer
        assert isinstance(renderer, expected)

    def test_invalid_level(self, reset_structlog):
        with pytest.raises(ValueError, match="LOUD"):
            configure_logging(level="LOUD")

    def test_extra_processors_precede_renderer(self, reset_structlog):
        def tag(logger, method_name, event_dict):
            return event_dict

        configure_logging(level="info", format_json=True, include_timestamp=False, extra_processors=[tag])
        processors = structlog.get_config()["processors"]
        assert processors[-2] is tag

    def test_loggers_usable(self):
        assert get_logger(__name__) is not None
        assert get_scoring_logger(__name__) is not None


class TestLogScoreResult:
    """Test standardized score logging."""

    def setup_method(self):
        self.bound = Mock()
        self.bound.bind.return_value = self.bound
        self.logger = Mock()
        self.logger.bind.return_value = self.bound

    def test_binds_score_fields(self):
        log_score_result(self.logger, "mental_battery", 67, "strained", 3)

        self.logger.bind.assert_called_once_with(
            scorer="mental_battery", score=67, label="strained", trades_analyzed=3,
        )
        self.bound.bind.assert_not_called()
        self.bound.info.assert_called_once_with("Score computed")

    def test_binds_context(self):
        log_score_result(self.logger, "behavior_heatmap", None, "positive", 5, {"active_windows": 4})

        self.bound.bind.assert_called_once_with(context={"active_windows": 4})
        self.bound.info.assert_called_once_with("Score computed")
