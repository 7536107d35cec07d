"""Tests for logging configuration."""

from __future__ import annotations

import pytest

from log_config.logger import configure_logging, get_logger, log_performance, logger


@pytest.fixture
def captured():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
    yield messages
    logger.remove(handler_id)


def test_get_logger_binds_name(captured) -> None:
    get_logger("correlation.test").info("hello")
    assert captured[-1]["extra"]["name"] == "correlation.test"
    assert captured[-1]["message"] == "hello"


def test_slow_operation_warns(captured) -> None:
    log_performance("tile", 250.0, threshold_ms=100.0)
    assert captured[-1]["level"].name == "WARNING"
    assert "tile" in captured[-1]["message"]


def test_fast_operation_is_debug(captured) -> None:
    log_performance("tile", 5.0, threshold_ms=100.0)
    assert captured[-1]["level"].name == "DEBUG"


def test_file_logging(tmp_path) -> None:
    configure_logging("DEBUG", logs_dir=tmp_path / "logs")
    try:
        get_logger(__name__).error("written to file")
    finally:
        # Resetting removes the file sinks and flushes their queues
        configure_logging("INFO")

    main_logs = list((tmp_path / "logs").glob("stereocorr_*.log"))
    error_logs = list((tmp_path / "logs").glob("errors_*.log"))
    assert len(main_logs) == 1
    assert len(error_logs) == 1
    assert "written to file" in main_logs[0].read_text()
    assert "written to file" in error_logs[0].read_text()
