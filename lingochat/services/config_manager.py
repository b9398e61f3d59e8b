"""
Configuration Manager - Load backend settings once at startup
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from lingochat.models.config import AppConfig

logger = logging.getLogger(__name__)

# Environment variable -> (section, key) overrides
_ENV_OVERRIDES = {
    "GEMINI_API_KEY": ("gemini", "api_key"),
    "GEMINI_MODEL": ("gemini", "model"),
    "TRANSLATE_API_KEY": ("translate", "api_key"),
    "LINGOCHAT_LOG_LEVEL": (None, "log_level"),
}


class ConfigManager:
    """Resolve the immutable application configuration"""

    _instance = None

    def __init__(self, config_file: Path | None = None, environ: dict[str, str] | None = None):
        self._environ = os.environ if environ is None else environ
        self._config_file = config_file or self._default_config_file()
        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    def _default_config_file(self) -> Path:
        # 1. explicit directory, 2. home directory
        config_dir = self._environ.get("LINGOCHAT_CONFIG_DIR")
        if not config_dir:
            config_dir = os.path.expanduser("~/.lingochat")
        return Path(config_dir) / "config.json"

    def _read_file(self) -> dict[str, Any]:
        """Read the JSON config file, empty when missing or unreadable"""
        if not self._config_file.exists():
            return {}

        try:
            with open(self._config_file, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("[ConfigManager] Error loading %s: %s", self._config_file, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("[ConfigManager] Ignoring %s: top level is not an object", self._config_file)
            return {}
        return data

    def _apply_env(self, data: dict[str, Any]) -> dict[str, Any]:
        merged = {key: dict(value) if isinstance(value, dict) else value for key, value in data.items()}
        for env_name, (section, key) in _ENV_OVERRIDES.items():
            value = self._environ.get(env_name)
            if not value:
                continue
            if section is None:
                merged[key] = value
            else:
                merged.setdefault(section, {})[key] = value
        return merged

    def _load_config(self) -> AppConfig:
        data = self._apply_env(self._read_file())
        try:
            config = AppConfig.model_validate(data)
        except ValidationError as e:
            logger.warning("[ConfigManager] Invalid configuration, using defaults: %s", e)
            config = AppConfig.model_validate(self._apply_env({}))

        if not config.gemini.api_key:
            logger.warning("[ConfigManager] Gemini API key not configured")
        return config

    def get_config(self) -> AppConfig:
        """Get the configuration"""
        return self._config

    def get(self, key: str, default=None):
        """Get specific config value"""
        return getattr(self._config, key, default)
