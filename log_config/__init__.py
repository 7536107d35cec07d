"""Logging module."""

from .logger import configure_logging, get_logger, log_performance, logger

__all__ = ["configure_logging", "get_logger", "log_performance", "logger"]
