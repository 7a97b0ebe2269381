import sys
from io import StringIO

import pytest
from loguru import logger

from wxfabric.log_config import configure_logging


def test_configure_logging_default_level():
    """Test configure_logging with default INFO level and stderr sink."""
    logger.remove()

    configure_logging()

    assert len(logger._core.handlers) == 1
    handler_id = list(logger._core.handlers.keys())[-1]
    handler = logger._core.handlers[handler_id]
    assert handler._levelno == logger.level("INFO").no


@pytest.mark.parametrize("level", ["debug", "WARNING"])
def test_configure_logging_custom_level(level):
    logger.remove()
    configure_logging(level=level)
    handler_id = list(logger._core.handlers.keys())[-1]
    handler = logger._core.handlers[handler_id]
    assert handler._levelno == logger.level(level.upper()).no


def test_configure_logging_removes_existing_handlers():
    logger.remove()
    logger.add(lambda _: None, level="ERROR")
    assert len(logger._core.handlers) == 1

    configure_logging(level="INFO")

    assert len(logger._core.handlers) == 1
    handler_id = list(logger._core.handlers.keys())[-1]
    assert logger._core.handlers[handler_id]._levelno == logger.level("INFO").no


def test_configure_logging_custom_sink():
    sink = StringIO()
    configure_logging(level="INFO", sink=sink)

    logger.info("credential refreshed")
    logger.debug("not shown")

    output = sink.getvalue()
    assert "credential refreshed" in output
    assert "not shown" not in output
    assert "INFO" in output


@pytest.fixture(autouse=True)
def reset_logger_after_test():
    """Fixture to reset Loguru to a default state after each test in this module."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="INFO")
