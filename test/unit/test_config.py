"""Tests for configuration loading in age_filter.config."""

import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from age_filter.config import Config, get_registry_headers, load_config
from age_filter.exceptions import ConfigurationError

ENV_KEYS = [
    "AGE_FILTER_MAX_AGE_DAYS",
    "AGE_FILTER_REGISTRY_URL",
    "AGE_FILTER_REQUEST_TIMEOUT",
    "AGE_FILTER_MAX_RETRIES",
    "AGE_FILTER_RETRY_BACKOFF",
    "AGE_FILTER_LOG_LEVEL",
    "AGE_FILTER_STRUCTURED_LOGGING",
]


@pytest.fixture
def clean_env():
    """Environment without any AGE_FILTER_ variables."""
    cleaned = {k: v for k, v in os.environ.items() if k not in ENV_KEYS}
    with patch.dict(os.environ, cleaned, clear=True):
        yield


class TestConfig:
    """Tests for the Config model."""

    def test_defaults(self):
        config = Config()
        assert config.max_age_days == 7
        assert str(config.registry_url).rstrip("/") == "https://registry.npmjs.org"
        assert config.request_timeout == 30
        assert config.max_retries == 3
        assert config.log_level == "INFO"
        assert config.structured_logging is True

    def test_policy(self):
        assert Config().policy().max_age == timedelta(days=7)
        assert Config(max_age_days=1.5).policy().max_age == timedelta(hours=36)

    def test_policy_accepts_largest_max_age(self):
        assert Config(max_age_days=999_999_999).policy().max_age == timedelta(days=999_999_999)

    @pytest.mark.parametrize("value", [0, -1, float("inf"), float("nan"), 1e12])
    def test_max_age_must_be_positive_and_finite(self, value):
        with pytest.raises(ValueError):
            Config(max_age_days=value)


class TestLoadConfig:
    """Tests for loading configuration from the environment."""

    def test_no_env_vars(self, clean_env):
        assert load_config() == Config()

    def test_loads_env_vars(self, clean_env):
        env = {
            "AGE_FILTER_MAX_AGE_DAYS": "14",
            "AGE_FILTER_REGISTRY_URL": "https://npm.internal.example.com",
            "AGE_FILTER_REQUEST_TIMEOUT": "5",
            "AGE_FILTER_MAX_RETRIES": "0",
            "AGE_FILTER_RETRY_BACKOFF": "0.5",
            "AGE_FILTER_LOG_LEVEL": "debug",
            "AGE_FILTER_STRUCTURED_LOGGING": "false",
        }
        with patch.dict(os.environ, env):
            config = load_config()

        assert config.max_age_days == 14
        assert str(config.registry_url).startswith("https://npm.internal.example.com")
        assert config.request_timeout == 5
        assert config.max_retries == 0
        assert config.retry_backoff == 0.5
        assert config.log_level == "DEBUG"
        assert config.structured_logging is False

    def test_overrides_take_precedence(self, clean_env):
        with patch.dict(os.environ, {"AGE_FILTER_MAX_AGE_DAYS": "14"}):
            config = load_config({"max_age_days": 3, "registry_url": None})

        assert config.max_age_days == 3
        assert str(config.registry_url).rstrip("/") == "https://registry.npmjs.org"

    @pytest.mark.parametrize(
        "env",
        [
            {"AGE_FILTER_MAX_AGE_DAYS": "a week"},
            {"AGE_FILTER_MAX_AGE_DAYS": "0"},
            {"AGE_FILTER_MAX_AGE_DAYS": "inf"},
            {"AGE_FILTER_MAX_AGE_DAYS": "1e12"},
            {"AGE_FILTER_REGISTRY_URL": "not a url"},
            {"AGE_FILTER_MAX_RETRIES": "-1"},
        ],
    )
    def test_invalid_values_raise_configuration_error(self, clean_env, env):
        with patch.dict(os.environ, env):
            with pytest.raises(ConfigurationError, match="Invalid configuration"):
                load_config()


def test_registry_headers():
    headers = get_registry_headers()
    assert headers["Accept"] == "application/json"
    assert headers["User-Agent"].startswith("registry-age-filter/")
