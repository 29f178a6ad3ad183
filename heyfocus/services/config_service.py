"""Config service - reads config.yaml into an AppConfig.

Order of precedence, lowest first:
1. AppConfig defaults
2. Keys from config.yaml (legacy keys are migrated first)
3. The HEYFOCUS_BUILD environment variable

A broken file never stops startup; it is reported and defaults are used.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from heyfocus.models.config import AppConfig

logger = logging.getLogger(__name__)

BUILD_ENV_VAR = "HEYFOCUS_BUILD"

_KNOWN_KEYS = ("build", "data_dir", "log_retention_days", "host", "port", "log_level")
_RETIRED_KEYS = ("store_path", "always_on_top", "window")


class ConfigService:
    """Owns the on-disk configuration file and the parsed AppConfig."""

    def __init__(self, config_path: str | Path = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """Parse config.yaml, migrate it, apply overrides and validate.

        Returns:
            The validated AppConfig (defaults when the file is absent or unusable).
        """
        values = self._migrate_config(self._read_yaml())
        self._apply_env_overrides(values)

        try:
            self._config = AppConfig.model_validate(values)
        except ValidationError as e:
            logger.warning(f"Invalid configuration in {self.config_path}, using defaults: {e}")
            self._config = AppConfig()
        return self._config

    def get_config(self) -> AppConfig:
        """Cached AppConfig; the file is read on first use only."""
        return self._config if self._config is not None else self.load()

    def _read_yaml(self) -> dict[str, Any]:
        if not self.config_path.exists():
            logger.info(f"No config at {self.config_path}, running with defaults")
            return {}

        try:
            with open(self.config_path) as f:
                document = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Unreadable config {self.config_path}: {e}")
            return {}

        if document is None:
            return {}
        if not isinstance(document, dict):
            logger.warning(f"Config {self.config_path} is not a mapping, ignoring it")
            return {}
        return document

    @staticmethod
    def _migrate_config(raw: dict[str, Any]) -> dict[str, Any]:
        """Map older config layouts onto the current keys.

        - `debug: true|false` becomes `build: debug|release` unless `build` is set
        - `log_level` is upper-cased
        - window and store-path keys from the desktop shell are dropped
        """
        values = {key: raw[key] for key in _KNOWN_KEYS if key in raw}

        if "build" not in values and "debug" in raw:
            values["build"] = "debug" if raw["debug"] else "release"

        if isinstance(values.get("log_level"), str):
            values["log_level"] = values["log_level"].upper()

        for key in _RETIRED_KEYS:
            if key in raw:
                logger.info(f"Config key '{key}' is no longer used")
        return values

    @staticmethod
    def _apply_env_overrides(values: dict[str, Any]) -> None:
        build = os.environ.get(BUILD_ENV_VAR, "").strip().lower()
        if not build:
            return
        if build not in ("debug", "release"):
            logger.warning(f"Ignoring {BUILD_ENV_VAR}={build!r}")
            return
        values["build"] = build


_config_service: ConfigService | None = None


def get_config_service(config_path: str | Path = "config.yaml") -> ConfigService:
    """Process-wide ConfigService; `config_path` only matters on the first call."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService(config_path)
    return _config_service


def reset_config_service() -> None:
    """Drop the process-wide ConfigService (tests)."""
    global _config_service
    _config_service = None
