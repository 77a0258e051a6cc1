"""
Exception classes for the registry age filter.

This module defines custom exception classes used throughout the service
for error handling and debugging. Only the registry client and configuration
loader raise them; the version selector never does.
"""

from typing import Any


class AgeFilterError(Exception):
    """Base exception class for age filter errors."""

    def __init__(
        self,
        message: str,
        code: str = "AGE_FILTER_ERROR",
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize age filter error.

        Args:
            message: Error message
            code: Error code for programmatic handling
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class APIError(AgeFilterError):
    """Exception for upstream API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        api_name: str = "Unknown",
        code: str = "API_ERROR",
        **kwargs,
    ):
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_body: API response body
            api_name: Name of the API that failed
            code: Error code for programmatic handling
            **kwargs: Additional details
        """
        details = {
            "api_name": api_name,
            "status_code": status_code,
            "response_body": response_body,
            **kwargs,
        }
        super().__init__(message, code=code, details=details)
        self.status_code = status_code
        self.response_body = response_body
        self.api_name = api_name


class RegistryError(APIError):
    """Exception for package registry errors."""

    def __init__(self, message: str, **kwargs):
        """Initialize registry error."""
        super().__init__(message, api_name="Package Registry", **kwargs)

    @property
    def is_transient(self) -> bool:
        """Whether retrying the request could succeed (network failure or 5xx)."""
        return self.status_code is None or self.status_code >= 500


class PackageNotFoundError(RegistryError):
    """Exception for when a package does not exist upstream."""

    def __init__(self, package: str, **kwargs):
        """
        Initialize package not found error.

        Args:
            package: The package name that was not found
            **kwargs: Additional details
        """
        super().__init__(
            f"Package not found: {package}",
            status_code=404,
            code="PACKAGE_NOT_FOUND",
            package=package,
            **kwargs,
        )
        self.package = package


class ConfigurationError(AgeFilterError):
    """Exception for configuration errors."""

    def __init__(self, message: str, setting: str | None = None, **kwargs):
        """
        Initialize configuration error.

        Args:
            message: Error message
            setting: Configuration setting that caused the error
            **kwargs: Additional details
        """
        details = {"setting": setting, **kwargs}
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)
        self.setting = setting
