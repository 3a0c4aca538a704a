"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any

from .defaults import EngineSettings, LoggingSettings

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_PERIODS = ("WEEK", "MONTH", "QUARTER", "YEAR")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates settings override dictionaries."""

    SECTIONS = {
        "engine": {f.name for f in fields(EngineSettings)},
        "logging": {f.name for f in fields(LoggingSettings)},
    }

    @staticmethod
    def validate_settings(config: dict[str, Any]) -> list[ValidationError]:
        """Validate a full settings mapping (sections and their keys)."""
        errors = []

        for section, values in config.items():
            if section not in ConfigValidator.SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown settings section",
                    value=values
                ))
                continue

            if not isinstance(values, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Section must be a mapping",
                    value=values
                ))
                continue

            for key in values:
                if key not in ConfigValidator.SECTIONS[section]:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown setting",
                        value=values[key]
                    ))

            if section == "engine":
                errors.extend(ConfigValidator.validate_engine_settings(values))
            else:
                errors.extend(ConfigValidator.validate_logging_settings(values))

        return errors

    @staticmethod
    def validate_engine_settings(params: dict[str, Any]) -> list[ValidationError]:
        """Validate engine settings."""
        errors = []

        for name in ("state_window", "history_limit", "forecast_window",
                     "recent_window", "heatmap_lookback_days", "trend_days"):
            if name in params:
                value = params[name]
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        if "insights_period" in params:
            value = params["insights_period"]
            if value not in VALID_PERIODS:
                errors.append(ValidationError(
                    field="insights_period",
                    message=f"Must be one of {', '.join(VALID_PERIODS)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_settings(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging settings."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in VALID_LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(VALID_LOG_LEVELS)}",
                    value=value
                ))

        if "format_json" in params:
            value = params["format_json"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="format_json",
                    message="Must be a boolean",
                    value=value
                ))

        return errors
