"""Tests for structured logging helpers."""

from unittest.mock import MagicMock

import structlog
from structlog.testing import capture_logs

from age_filter.config import Config
from age_filter.logging import configure_logging, get_logger, log_downgrade, log_rejection


def test_log_downgrade_emits_warning_with_context():
    logger = MagicMock()

    log_downgrade(logger, "demo", "2.0.0", "1.9.0", 1, 30)

    logger.warning.assert_called_once_with(
        "Downgrading demo from 2.0.0 (1 days old) to 1.9.0 (30 days old)",
        package="demo",
        latest_version="2.0.0",
        downgrade_version="1.9.0",
        latest_age=1,
        downgraded_age=30,
    )


def test_log_rejection_emits_error_with_context():
    logger = MagicMock()

    log_rejection(logger, "demo", "2.0.0", 0)

    logger.error.assert_called_once_with(
        "No acceptable version found for demo - all versions are too new",
        package="demo",
        latest_version="2.0.0",
        latest_age=0,
    )


def test_get_logger_binds_context():
    with capture_logs() as captured:
        get_logger("age_filter.test", client="registry").info("hello")

    assert captured == [{"event": "hello", "client": "registry", "log_level": "info"}]


def test_configure_logging_console_mode():
    try:
        configure_logging(Config(structured_logging=False, log_level="WARNING"))
        assert structlog.is_configured()
    finally:
        structlog.reset_defaults()
