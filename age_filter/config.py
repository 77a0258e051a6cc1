"""
Configuration for the registry age filter.

This module handles environment variables and configuration settings
for the filtering proxy.
"""

import os
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, Field, HttpUrl

from .exceptions import ConfigurationError
from .types import Policy

USER_AGENT = "registry-age-filter/0.1.0"


class Config(BaseModel):
    """Configuration model for the registry age filter."""

    # Age policy
    # timedelta cannot represent more than 999999999 days
    max_age_days: float = Field(
        7,
        gt=0,
        le=999_999_999,
        allow_inf_nan=False,
        description="Minimum age in days a version needs to be served as latest",
    )

    # Upstream registry
    registry_url: HttpUrl = Field(
        default_factory=lambda: HttpUrl("https://registry.npmjs.org"),
        description="Upstream npm-compatible registry URL",
    )

    # Request Configuration
    request_timeout: int = Field(30, ge=1, description="Request timeout in seconds")
    max_retries: int = Field(3, ge=0, description="Maximum retry attempts")
    retry_backoff: float = Field(1.0, ge=0, description="Retry backoff factor")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    structured_logging: bool = Field(True, description="Use structured logging")

    def policy(self) -> Policy:
        """Build the immutable age policy applied to every package."""
        return Policy(max_age=timedelta(days=self.max_age_days))


def load_config(overrides: dict[str, Any] | None = None) -> Config:
    """
    Load configuration from environment variables.

    Args:
        overrides: Values that take precedence over the environment
            (typically command line options); ``None`` entries are ignored

    Returns:
        Configured Config instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    try:
        config_data: dict[str, Any] = {}

        # Age policy
        if max_age_days := os.getenv("AGE_FILTER_MAX_AGE_DAYS"):
            config_data["max_age_days"] = float(max_age_days)

        # Upstream registry
        if registry_url := os.getenv("AGE_FILTER_REGISTRY_URL"):
            config_data["registry_url"] = registry_url

        # Request configuration
        if request_timeout := os.getenv("AGE_FILTER_REQUEST_TIMEOUT"):
            config_data["request_timeout"] = int(request_timeout)

        if max_retries := os.getenv("AGE_FILTER_MAX_RETRIES"):
            config_data["max_retries"] = int(max_retries)

        if retry_backoff := os.getenv("AGE_FILTER_RETRY_BACKOFF"):
            config_data["retry_backoff"] = float(retry_backoff)

        # Logging
        if log_level := os.getenv("AGE_FILTER_LOG_LEVEL"):
            config_data["log_level"] = log_level.upper()

        if structured_logging := os.getenv("AGE_FILTER_STRUCTURED_LOGGING"):
            config_data["structured_logging"] = structured_logging.lower() == "true"

        if overrides:
            config_data.update({k: v for k, v in overrides.items() if v is not None})

        return Config(**config_data)

    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def get_registry_headers() -> dict[str, str]:
    """
    Get upstream registry headers.

    Returns:
        Dictionary of headers for package metadata requests
    """
    return {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
