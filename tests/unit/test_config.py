"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Environment variable names and defaults match the external contract
- A missing BRS_API_KEY is rejected at startup
- Validation catches invalid values

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest

from core.config import Settings, validate_configuration
from core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure the host environment cannot leak into these tests"""
    for var in ("BRS_API_KEY", "PORT", "POLL_INTERVAL", "DB_PATH", "LOG_LEVEL",
                "STALE_THRESHOLD", "REQUEST_TIMEOUT", "SHUTDOWN_TIMEOUT", "APP_HOST",
                "BRS_API_URL"):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    """Defaults that are part of the external contract"""

    def test_default_port(self):
        assert Settings(_env_file=None).port == 8080

    def test_default_poll_interval(self):
        assert Settings(_env_file=None).poll_interval == 60

    def test_default_db_path(self):
        assert Settings(_env_file=None).db_path == "/data/gold.db"

    def test_default_timeouts(self):
        config = Settings(_env_file=None)
        assert config.request_timeout == 10.0
        assert config.stale_threshold == 300.0


class TestEnvironmentLoading:
    """Values are read from the documented environment variables"""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("BRS_API_KEY", "abc123")
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("POLL_INTERVAL", "15")
        monkeypatch.setenv("DB_PATH", "/tmp/x.db")

        config = Settings(_env_file=None)

        assert config.brs_api_key == "abc123"
        assert config.port == 9090
        assert config.poll_interval == 15
        assert config.db_path == "/tmp/x.db"

    @pytest.mark.parametrize("var,field,default", [
        ("PORT", "port", 8080),
        ("POLL_INTERVAL", "poll_interval", 60),
        ("DB_PATH", "db_path", "/data/gold.db"),
        ("SHUTDOWN_TIMEOUT", "shutdown_timeout", 5.0),
    ])
    def test_empty_value_falls_back_to_default(self, monkeypatch, var, field, default):
        monkeypatch.setenv(var, "")

        assert getattr(Settings(_env_file=None), field) == default

    def test_blank_lines_in_env_file_use_defaults(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("BRS_API_KEY=abc\nPORT=\nPOLL_INTERVAL=\n")

        config = Settings(_env_file=str(env_file))

        assert config.brs_api_key == "abc"
        assert config.port == 8080
        assert config.poll_interval == 60


class TestValidation:
    """validate_configuration rejects unusable settings"""

    def test_missing_api_key_is_fatal(self):
        with pytest.raises(ConfigError, match="BRS_API_KEY"):
            validate_configuration(Settings(_env_file=None))

    def test_blank_api_key_is_fatal(self):
        with pytest.raises(ConfigError):
            validate_configuration(Settings(_env_file=None, brs_api_key="   "))

    def test_valid_configuration_passes(self):
        validate_configuration(Settings(_env_file=None, brs_api_key="k"))

    @pytest.mark.parametrize("field,value", [
        ("port", 0),
        ("port", 70000),
        ("poll_interval", 0),
        ("request_timeout", -1),
        ("stale_threshold", 0),
        ("log_level", "LOUD"),
    ])
    def test_invalid_values_rejected(self, field, value):
        config = Settings(_env_file=None, brs_api_key="k", **{field: value})
        with pytest.raises(ConfigError):
            validate_configuration(config)
