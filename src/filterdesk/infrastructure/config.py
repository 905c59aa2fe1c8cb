"""Configuration management for the filterdesk console."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from ..domain.models import TimeRange

ENV_API_URL = "FILTERDESK_API_URL"
ENV_REQUEST_TIMEOUT_MS = "FILTERDESK_REQUEST_TIMEOUT_MS"
ENV_LOG_LEVEL = "FILTERDESK_LOG_LEVEL"


class ApiConfig(BaseModel):
    """Backend REST API connection settings."""

    base_url: str = Field(
        default="http://localhost:5000", description="Base URL of the backend API"
    )
    request_timeout_ms: int | None = Field(
        default=None,
        gt=0,
        description="Request timeout in milliseconds (None keeps the transport default)",
    )
    verify_ssl: bool = Field(default=True, description="SSL verification")
    user_agent: str = Field(
        default="filterdesk/0.1", description="User-Agent header sent with requests"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING", description="Log level")
    format: Literal["console", "json"] = Field(
        default="console", description="Log output format"
    )


class ViewDefaults(BaseModel):
    """Initial selections for the management views."""

    time_range: TimeRange = Field(
        default=TimeRange.LAST_DAY, description="Initial traffic time range"
    )
    show_resolved: bool = Field(
        default=False, description="Include resolved alerts in the initial listing"
    )


class ConsoleConfig(BaseModel):
    """Console configuration model."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    views: ViewDefaults = Field(default_factory=ViewDefaults)


class ConfigManager:
    """Manager for loading and managing console configuration."""

    def __init__(self, config_file: str | None = None):
        """Initialize the config manager.

        Args:
            config_file: Optional path to configuration file
        """
        self.config_file = config_file or "config/filterdesk.yaml"
        self._config: ConsoleConfig | None = None

    def load_config(self) -> ConsoleConfig:
        """Load configuration from file and environment variables.

        Environment variables take precedence over the file.

        Returns:
            ConsoleConfig instance with loaded configuration
        """
        config_data: dict[str, Any] = {}

        config_path = Path(self.config_file)
        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        self._apply_env_overrides(config_data)
        self._config = ConsoleConfig(**config_data)
        return self._config

    def _apply_env_overrides(self, config_data: dict[str, Any]) -> None:
        api = config_data.setdefault("api", {})
        if url := os.environ.get(ENV_API_URL):
            api["base_url"] = url
        if timeout := os.environ.get(ENV_REQUEST_TIMEOUT_MS):
            api["request_timeout_ms"] = int(timeout)
        if level := os.environ.get(ENV_LOG_LEVEL):
            config_data.setdefault("logging", {})["level"] = level

    def get_config(self) -> ConsoleConfig:
        """Get the current configuration, loading it on first use."""
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self) -> ConsoleConfig:
        return self.load_config()

    def save_default_config(self) -> None:
        """Save a default configuration file."""
        config_path = Path(self.config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config_data = ConsoleConfig().model_dump(mode="json")

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)
