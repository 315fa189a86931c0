"""
Tests for logging setup and timing helpers.
"""

import logging

import pytest

from het_sensitivity.logging_config import PerformanceLogger, setup_logging, time_it


def test_setup_logging_handlers(temp_dir):
    log_file = temp_dir / "logs" / "run.log"
    logger = setup_logging(level="DEBUG", log_file=log_file)

    assert logger.name == "het_sensitivity"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    assert logger.propagate is False

    logger.debug("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text()


def test_performance_logger(caplog):
    logger = logging.getLogger("tests.performance")
    with caplog.at_level(logging.INFO, logger="tests.performance"):
        with PerformanceLogger(logger, "unit work"):
            pass
    messages = [record.getMessage() for record in caplog.records]
    assert messages[0] == "Starting unit work"
    assert messages[1].startswith("Completed unit work in")


def test_performance_logger_failure(caplog):
    logger = logging.getLogger("tests.performance")
    with caplog.at_level(logging.INFO, logger="tests.performance"):
        with pytest.raises(RuntimeError):
            with PerformanceLogger(logger, "failing work"):
                raise RuntimeError("boom")
    assert caplog.records[-1].levelno == logging.ERROR
    assert "boom" in caplog.records[-1].getMessage()


def test_time_it_returns_value():
    @time_it("doubling")
    def double(x):
        return 2 * x

    assert double(4) == 8
    assert double.__name__ == "double"
