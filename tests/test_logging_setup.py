# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
test_logging_setup.py — Tests for configure_logging.

configure_logging replaces the root handlers and structlog's global
config, so the fixture puts both back afterwards.
"""

import logging

import pytest
import structlog

from weather_alert_engine.logging_setup import configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_log_lines_reach_the_log_file(tmp_path, restore_logging):
    log_path = tmp_path / "logs" / "weather_alert_engine.log"
    configure_logging("INFO", log_path)

    logger = structlog.get_logger("weather_alert_engine.test")
    logger.info("Processed weather alerts", alertsTriggered=2)
    logger.debug("Not written at INFO")

    text = log_path.read_text()
    assert "Processed weather alerts" in text
    assert "alertsTriggered=2" in text
    assert "[info" in text
    assert "Not written at INFO" not in text


def test_log_path_is_optional(restore_logging):
    configure_logging("DEBUG")
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
