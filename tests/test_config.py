"""Tests for GateConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from edugate import Environment, GateConfig, LogLevel, load_config_from_env


class TestGateConfig:
    """Tests for GateConfig model."""

    def test_create_default_config(self) -> None:
        """Test creating a GateConfig with defaults."""
        config = GateConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.environment == Environment.DEVELOPMENT
        assert config.redis_url is None
        assert config.redis_prefix == "edugate"
        assert config.service_name is None

    def test_log_level_from_string(self) -> None:
        """Test creating config with log level as string."""
        config = GateConfig(log_level="debug")
        assert config.log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        """Test creating config with invalid log level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            GateConfig(log_level="INVALID")

    def test_environment_aliases(self) -> None:
        """Test short environment names."""
        assert GateConfig(environment="prod").environment == Environment.PRODUCTION
        assert GateConfig(environment="DEV").environment == Environment.DEVELOPMENT
        assert GateConfig(environment="test").environment == Environment.TEST

    def test_environment_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid environment"):
            GateConfig(environment="staging")

    def test_error_details_outside_production(self) -> None:
        """Test failure-body detail follows the environment."""
        assert GateConfig(environment="development").include_error_details is True
        assert GateConfig(environment="test").include_error_details is True
        assert GateConfig(environment="production").include_error_details is False

    def test_redis_url_validation_valid(self) -> None:
        """Test valid Redis URL formats."""
        valid_urls = [
            "redis://localhost:6379/0",
            "rediss://localhost:6379/0",
            "unix:///tmp/redis.sock",
        ]
        for url in valid_urls:
            config = GateConfig(redis_url=url)
            assert config.redis_url == url

    def test_redis_url_validation_invalid(self) -> None:
        """Test invalid Redis URL formats."""
        for url in ("http://localhost:6379", "localhost:6379"):
            with pytest.raises(ValueError, match="Redis URL must start with"):
                GateConfig(redis_url=url)

    def test_extra_fields_forbidden(self) -> None:
        """Test that extra fields are forbidden."""
        with pytest.raises(Exception):  # Pydantic validation error
            GateConfig(otel_enabled=True)  # type: ignore[call-arg]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_load_defaults(self) -> None:
        """Test loading config with no environment variables."""
        config = load_config_from_env()
        assert config.log_level == LogLevel.INFO
        assert config.environment == Environment.DEVELOPMENT
        assert config.redis_url is None

    @patch.dict(
        os.environ,
        {
            "LOG_LEVEL": "WARNING",
            "LOG_JSON": "yes",
            "EDUGATE_ENV": "production",
            "REDIS_URL": "redis://localhost:6379/0",
            "EDUGATE_REDIS_PREFIX": "school-a",
            "SERVICE_NAME": "projects-api",
        },
        clear=True,
    )
    def test_load_from_env(self) -> None:
        """Test loading config from environment variables."""
        config = load_config_from_env()
        assert config.log_level == LogLevel.WARNING
        assert config.log_json is True
        assert config.environment == Environment.PRODUCTION
        assert config.redis_url == "redis://localhost:6379/0"
        assert config.redis_prefix == "school-a"
        assert config.service_name == "projects-api"

    @patch.dict(os.environ, {"LOG_JSON": "off"}, clear=True)
    def test_log_json_false(self) -> None:
        assert load_config_from_env().log_json is False
