"""Settings loader with 3-tier precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

from ..errors import ConfigurationError
from .defaults import EngineSettings, LoggingSettings, Settings, get_default_settings
from .validation import ConfigValidator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ConfigLoader:
    """Manages settings loading with 3-tier precedence."""

    config_dir: Path
    defaults: Settings

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_settings(),
        )

    def load_settings_file(self) -> dict[str, Any]:
        """Load overrides from settings.yaml, if present."""
        settings_file = self.config_dir / "settings.yaml"

        if not settings_file.exists():
            return {}

        with open(settings_file) as f:
            file_config = yaml.safe_load(f)

        if file_config is None:
            return {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                "settings.yaml must contain a mapping",
                source=str(settings_file)
            )

        return file_config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge settings with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. settings.yaml in the config directory
        3. Built-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        file_config = self.load_settings_file()
        self._validate(file_config, source="settings.yaml")
        config = self._deep_merge(config, file_config)

        if overrides:
            self._validate(overrides, source="overrides")
            config = self._deep_merge(config, overrides)

        return config

    def load_settings(self, overrides: Optional[dict[str, Any]] = None) -> Settings:
        """Build a typed Settings instance from the merged configuration."""
        config = self.merge_config(overrides)

        settings = Settings(
            engine=EngineSettings(**config["engine"]),
            logging=LoggingSettings(**config["logging"]),
        )

        logger.debug("Settings loaded", config_dir=str(self.config_dir), engine=config["engine"])
        return settings

    def _validate(self, config: dict[str, Any], source: str) -> None:
        errors = ConfigValidator.validate_settings(config)
        if errors:
            messages = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            raise ConfigurationError(
                f"Invalid settings in {source}: {'; '.join(messages)}",
                errors=errors,
                source=source
            )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
