"""Custom exception classes for stereo correlation."""

from __future__ import annotations

from typing import Optional


class StereoCorrelationError(Exception):
    """Base exception for all stereo correlation errors."""

    pass


class ContractViolationError(StereoCorrelationError):
    """Raised when a caller or internal invariant is broken.

    These are fatal: the computation is aborted and never retried.
    """

    pass


class PointEvaluationError(ContractViolationError, NotImplementedError):
    """Raised when a correlation view is asked for a single pixel."""

    pass


class TileSizeMismatchError(ContractViolationError):
    """Raised when a computed tile does not match the requested size."""

    def __init__(self, message: str, requested: Optional[tuple] = None, produced: Optional[tuple] = None):
        self.requested = requested
        self.produced = produced
        super().__init__(message)


class ConfigError(StereoCorrelationError):
    """Base exception for configuration errors."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when configuration file is invalid or corrupted."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)
