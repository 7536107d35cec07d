"""Configuration loading for stereo correlation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from configs.validator import validate_config
from exceptions import ConfigError, InvalidConfigError
from log_config.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default.yaml")


@dataclass(frozen=True)
class CorrelationConfig:
    search_region: Tuple[int, int, int, int]  # min_x, min_y, max_x, max_y (inclusive range)
    kernel_size: Tuple[int, int]
    mode: str = "pyramid"
    cost_type: str = "absolute_difference"
    consistency_threshold: float = -1.0  # Negative disables the left/right check
    consistency_metric: str = "per_axis"


@dataclass(frozen=True)
class PrefilterConfig:
    type: str = "none"
    sigma: Optional[float] = None


@dataclass(frozen=True)
class TilingConfig:
    tile_size: Tuple[int, int] = (256, 256)
    num_workers: int = 1


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    logs_dir: Optional[str] = None


@dataclass(frozen=True)
class AppConfig:
    correlation: CorrelationConfig
    prefilter: PrefilterConfig
    tiling: TilingConfig
    logging: LoggingConfig


def config_from_dict(data: Dict[str, Any]) -> AppConfig:
    """Validate a configuration mapping and build an ``AppConfig``.

    Raises:
        ConfigError: If the mapping is invalid
    """
    validate_config(data)

    try:
        correlation_data = data["correlation"]
        correlation = CorrelationConfig(
            search_region=tuple(correlation_data["search_region"]),
            kernel_size=tuple(correlation_data["kernel_size"]),
            mode=correlation_data["mode"],
            cost_type=correlation_data["cost_type"],
            consistency_threshold=float(correlation_data["consistency_threshold"]),
            consistency_metric=correlation_data["consistency_metric"],
        )
        min_x, min_y, max_x, max_y = correlation.search_region
        if max_x < min_x or max_y < min_y:
            raise InvalidConfigError(f"Search region max must not be below min: {correlation.search_region}")
        if any(k % 2 == 0 for k in correlation.kernel_size):
            raise InvalidConfigError(f"Kernel size must be odd: {correlation.kernel_size}")

        prefilter = PrefilterConfig(**data["prefilter"])
        tiling = TilingConfig(
            tile_size=tuple(data["tiling"]["tile_size"]),
            num_workers=int(data["tiling"]["num_workers"]),
        )
        logging_config = LoggingConfig(**data["logging"])

    except ConfigError:
        raise
    except Exception as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")

    return AppConfig(
        correlation=correlation,
        prefilter=prefilter,
        tiling=tiling,
        logging=logging_config,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    path = Path(path)
    try:
        logger.info(f"Loading configuration from {path}")
        if not path.exists():
            raise InvalidConfigError(f"Configuration file not found: {path}")

        data = yaml.safe_load(path.read_text())
        if not isinstance(data, dict):
            raise InvalidConfigError(f"Configuration file must contain a mapping: {path}")

    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    config = config_from_dict(data)
    logger.info(
        f"Configuration loaded successfully: {config.correlation.mode} correlator, "
        f"kernel {config.correlation.kernel_size}, search {config.correlation.search_region}"
    )
    return config


__all__ = [
    "AppConfig",
    "CorrelationConfig",
    "PrefilterConfig",
    "TilingConfig",
    "LoggingConfig",
    "DEFAULT_CONFIG_PATH",
    "config_from_dict",
    "load_config",
]
