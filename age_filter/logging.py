"""
Structured logging configuration for the registry age filter.

This module sets up structured logging using structlog and provides
helpers for the events the filter emits.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

from .config import Config


def configure_logging(config: Config) -> None:
    """
    Configure structured logging for the application.

    Args:
        config: Configuration instance with logging settings
    """
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stderr,
    )

    if config.structured_logging:
        renderer = structlog.processors.JSONRenderer()
        timestamper = structlog.processors.TimeStamper(fmt="iso")
    else:
        renderer = structlog.dev.ConsoleRenderer()
        timestamper = structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S")

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)
        **kwargs: Additional context to bind to the logger

    Returns:
        Configured structured logger
    """
    logger = structlog.get_logger(name)
    if kwargs:
        logger = logger.bind(**kwargs)
    return logger


def log_api_request(
    logger: structlog.stdlib.BoundLogger,
    method: str,
    url: str,
    status_code: int,
    duration_ms: float,
    **kwargs: Any,
) -> None:
    """
    Log upstream API request with structured data.

    Args:
        logger: Structured logger instance
        method: HTTP method
        url: Request URL
        status_code: Response status code
        duration_ms: Request duration in milliseconds
        **kwargs: Additional context
    """
    logger.info(
        "API request completed",
        method=method,
        url=url,
        status_code=status_code,
        duration_ms=duration_ms,
        **kwargs,
    )


def log_downgrade(
    logger: structlog.stdlib.BoundLogger,
    package: str,
    latest_version: str,
    downgrade_version: str,
    latest_age: int,
    downgraded_age: int,
) -> None:
    """
    Log a rewrite of the latest dist-tag.

    Args:
        logger: Structured logger instance
        package: Package name
        latest_version: Version the registry advertised as latest
        downgrade_version: Version served as latest instead
        latest_age: Age of the advertised latest in whole days
        downgraded_age: Age of the served version in whole days
    """
    logger.warning(
        f"Downgrading {package} from {latest_version} ({latest_age} days old) "
        f"to {downgrade_version} ({downgraded_age} days old)",
        package=package,
        latest_version=latest_version,
        downgrade_version=downgrade_version,
        latest_age=latest_age,
        downgraded_age=downgraded_age,
    )


def log_rejection(
    logger: structlog.stdlib.BoundLogger,
    package: str,
    latest_version: str,
    latest_age: int,
) -> None:
    """
    Log a package for which no acceptable version exists.

    Args:
        logger: Structured logger instance
        package: Package name
        latest_version: Version the registry advertised as latest
        latest_age: Age of the advertised latest in whole days
    """
    logger.error(
        f"No acceptable version found for {package} - all versions are too new",
        package=package,
        latest_version=latest_version,
        latest_age=latest_age,
    )
