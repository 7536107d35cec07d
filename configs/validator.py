"""Configuration validation using JSON Schema."""

from __future__ import annotations

import copy
from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

# JSON Schema for default.yaml configuration
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["correlation"],
    "properties": {
        "correlation": {
            "type": "object",
            "required": ["search_region", "kernel_size"],
            "properties": {
                "mode": {"type": "string", "enum": ["pyramid", "flat"], "default": "pyramid"},
                "search_region": {
                    "type": "array",
                    "items": {"type": "integer"},
                    "minItems": 4,
                    "maxItems": 4,
                },
                "kernel_size": {
                    "type": "array",
                    "items": {"type": "integer", "minimum": 1, "maximum": 255},
                    "minItems": 2,
                    "maxItems": 2,
                },
                "cost_type": {
                    "type": "string",
                    "enum": ["absolute_difference", "squared_difference", "cross_correlation"],
                    "default": "absolute_difference",
                },
                "consistency_threshold": {"type": "number", "default": -1.0},
                "consistency_metric": {
                    "type": "string",
                    "enum": ["per_axis", "euclidean"],
                    "default": "per_axis",
                },
            },
        },
        "prefilter": {
            "type": "object",
            "default": {},
            "properties": {
                "type": {
                    "type": "string",
                    "enum": ["none", "laplacian_of_gaussian", "subtracted_mean", "normalize"],
                    "default": "none",
                },
                "sigma": {"type": ["number", "null"], "exclusiveMinimum": 0, "default": None},
            },
        },
        "tiling": {
            "type": "object",
            "default": {},
            "properties": {
                "tile_size": {
                    "type": "array",
                    "items": {"type": "integer", "minimum": 16},
                    "minItems": 2,
                    "maxItems": 2,
                    "default": [256, 256],
                },
                "num_workers": {"type": "integer", "minimum": 1, "maximum": 256, "default": 1},
            },
        },
        "logging": {
            "type": "object",
            "default": {},
            "properties": {
                "level": {
                    "type": "string",
                    "enum": ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
                    "default": "INFO",
                },
                "logs_dir": {"type": ["string", "null"], "default": None},
            },
        },
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        for prop, subschema in properties.items():
            if "default" in subschema and validator.is_type(instance, "object"):
                instance.setdefault(prop, copy.deepcopy(subschema["default"]))

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema, filling in defaults.

    Args:
        config: Configuration dictionary (modified in place with defaults)

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        # Sorted so the report order does not depend on schema traversal
        errors = sorted(validator.iter_errors(config), key=lambda e: [str(p) for p in e.path])

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            logger.error(f"Configuration validation failed with {len(errors)} errors")
            for msg in error_messages:
                logger.error(f"  - {msg}")

            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
                validation_errors=error_messages,
            )

        logger.info("Configuration validation passed")

    except jsonschema.exceptions.SchemaError as e:
        logger.error(f"Invalid schema: {e}")
        raise ConfigValidationError(f"Invalid schema definition: {e}")


__all__ = ["validate_config", "CONFIG_SCHEMA"]
