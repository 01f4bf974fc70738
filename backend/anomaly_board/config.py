"""
Configuration management for the dashboard backend.

The upstream endpoint layout is an explicit value supplied at process start
(base URL plus path templates) instead of being derived from the runtime
environment.
"""

import json
import logging
import os
from pathlib import Path
from urllib.parse import urlparse

from .models import AppConfig

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "ANOMALY_BOARD_CONFIG_PATH"
BASE_URL_ENV = "ANOMALY_BOARD_API_BASE_URL"

RISE_MIN = 6
RISE_MAX = 15


class ConfigManager:
    """
    Manages application configuration.

    Handles loading from disk, environment overrides, and persistence.
    """

    DEFAULT_CONFIG_PATH = Path.home() / ".anomaly-board" / "config.json"

    def __init__(self, config_path: Path | None = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config file (defaults to ~/.anomaly-board/config.json)
        """
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig | None = None

    def get_config(self) -> AppConfig:
        """
        Get current configuration, loading from disk if needed.

        Returns:
            Current AppConfig
        """
        if self._config is None:
            self._config = self._apply_env_overrides(self._load_config())
        return self._config

    def set_config(self, config: AppConfig) -> AppConfig:
        """
        Update configuration and persist to disk.

        Args:
            config: New configuration

        Returns:
            Updated configuration
        """
        self._config = config
        self._save_config(config)
        return config

    def _load_config(self) -> AppConfig:
        """Load configuration from disk or return defaults."""
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return AppConfig(**data)
        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            return AppConfig()

    def _apply_env_overrides(self, config: AppConfig) -> AppConfig:
        base_url = os.getenv(BASE_URL_ENV, "").strip()
        if base_url:
            return config.model_copy(update={"api_base_url": base_url})
        return config

    def _save_config(self, config: AppConfig) -> None:
        """
        Save configuration to disk.

        Args:
            config: Configuration to save
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(), f, indent=2, ensure_ascii=False)
            logger.info(f"Saved config to {self.config_path}")
        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")


class ConfigValidator:
    """
    Validates configuration values.

    Ensures configuration is within acceptable ranges and formats.
    """

    @staticmethod
    def validate_app_config(config: AppConfig) -> list[str]:
        """
        Validate complete application configuration.

        Args:
            config: Config to validate

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        parsed = urlparse(config.api_base_url.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append("api_base_url must be a valid http(s) URL")

        for field in (
            "industry_list_path",
            "wind_info_path",
            "big_rise_volume_path",
            "trading_crowding_path",
        ):
            if not getattr(config, field).startswith("/"):
                errors.append(f"{field} must start with '/'")

        if config.request_timeout_sec <= 0:
            errors.append("request_timeout_sec must be positive")

        if not RISE_MIN <= config.default_rise <= RISE_MAX:
            errors.append(f"default_rise must be between {RISE_MIN} and {RISE_MAX}")

        return errors


def create_config_manager(config_path: str | None = None) -> ConfigManager:
    """
    Factory function to create ConfigManager.

    Args:
        config_path: Optional path to config file; falls back to the
            ANOMALY_BOARD_CONFIG_PATH environment variable

    Returns:
        ConfigManager instance
    """
    path_text = config_path or os.getenv(CONFIG_PATH_ENV, "").strip()
    path = Path(path_text) if path_text else None
    return ConfigManager(config_path=path)
