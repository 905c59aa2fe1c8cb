"""Tests for configuration loading."""

import pytest
import yaml
from pydantic import ValidationError

from filterdesk.domain.models import TimeRange
from filterdesk.infrastructure.config import (
    ENV_API_URL,
    ENV_LOG_LEVEL,
    ENV_REQUEST_TIMEOUT_MS,
    ApiConfig,
    ConfigManager,
    ConsoleConfig,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (ENV_API_URL, ENV_REQUEST_TIMEOUT_MS, ENV_LOG_LEVEL):
        monkeypatch.delenv(name, raising=False)


class TestConfigModels:
    def test_defaults(self):
        config = ConsoleConfig()

        assert config.api.base_url == "http://localhost:5000"
        assert config.api.request_timeout_ms is None
        assert config.logging.level == "WARNING"
        assert config.views.time_range == TimeRange.LAST_DAY
        assert config.views.show_resolved is False

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ApiConfig(request_timeout_ms=0)


class TestConfigManager:
    def test_missing_file_gives_defaults(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "absent.yaml"))

        assert manager.load_config() == ConsoleConfig()

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "filterdesk.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "api": {"base_url": "https://appliance:8443"},
                    "views": {"time_range": "7d", "show_resolved": True},
                }
            )
        )

        config = ConfigManager(str(path)).load_config()

        assert config.api.base_url == "https://appliance:8443"
        assert config.views.time_range == TimeRange.LAST_WEEK
        assert config.views.show_resolved is True

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "filterdesk.yaml"
        path.write_text(yaml.safe_dump({"api": {"base_url": "http://from-file"}}))
        monkeypatch.setenv(ENV_API_URL, "http://from-env")
        monkeypatch.setenv(ENV_REQUEST_TIMEOUT_MS, "1500")
        monkeypatch.setenv(ENV_LOG_LEVEL, "DEBUG")

        config = ConfigManager(str(path)).load_config()

        assert config.api.base_url == "http://from-env"
        assert config.api.request_timeout_ms == 1500
        assert config.logging.level == "DEBUG"

    def test_get_config_caches(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "absent.yaml"))

        assert manager.get_config() is manager.get_config()
        assert manager.reload_config() is not None

    def test_save_default_config_round_trips(self, tmp_path):
        path = tmp_path / "nested" / "filterdesk.yaml"
        manager = ConfigManager(str(path))

        manager.save_default_config()

        assert path.exists()
        assert yaml.safe_load(path.read_text())["views"]["time_range"] == "24h"
        assert manager.load_config() == ConsoleConfig()
