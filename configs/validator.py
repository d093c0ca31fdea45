"""Configuration validation using JSON Schema."""

from __future__ import annotations

import copy
from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

_POSITIVE = {"type": "number", "exclusiveMinimum": 0}
_NON_NEGATIVE = {"type": "number", "minimum": 0}


def _section(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "default": {},
        "additionalProperties": False,
        "properties": properties,
    }


# JSON Schema for default.yaml configuration. Every section is optional and
# missing keys fall back to the dataclass defaults.
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "capture": _section({
            "width": {"type": "integer", "minimum": 1, "maximum": 4096},
            "height": {"type": "integer", "minimum": 1, "maximum": 4096},
            "flip": {"type": "boolean"},
        }),
        "background": _section({
            "ignore_frames": {"type": "integer", "minimum": 0},
            "init_frames": {"type": "integer", "minimum": 1},
            "low_scale": _POSITIVE,
            "high_scale": _POSITIVE,
            "min_diff_mm": _NON_NEGATIVE,
            "mm_per_px": _POSITIVE,
            "camera_distance_mm": _POSITIVE,
            "center_column_width_factor": {"type": "number", "minimum": 0.0, "maximum": 0.5},
        }),
        "segmentation": _section({
            "morph_iterations": {"type": "integer", "minimum": 0, "maximum": 10},
            "contour_approx_level": _NON_NEGATIVE,
            "perim_scale": _POSITIVE,
        }),
        "regions": _section({
            "hand_max_height_scale": {"type": "integer", "minimum": 1},
            "hand_min_height_scale": {"type": "integer", "minimum": 1},
            "arm_joint_height_scale": {"type": "integer", "minimum": 1},
            "orientation": {"type": "string", "enum": ["bottom", "auto"]},
            "bottom_dist_thresh_px": {"type": "integer", "minimum": 0},
        }),
        "fingertips": _section({
            "min_defect_depth_px": _POSITIVE,
            "merge_radius_px": _NON_NEGATIVE,
            "max_fingertips": {"type": "integer", "minimum": 1, "maximum": 10},
            "depth_window_px": {"type": "integer", "minimum": 0, "maximum": 10},
            "min_confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
            "history_length": {"type": "integer", "minimum": 1},
        }),
        "tracking": _section({
            "debounce_count": {"type": "integer", "minimum": 1},
            "finger_thickness_mm": _NON_NEGATIVE,
            "filter_mode": {"type": "string", "enum": ["debounce", "none"]},
        }),
        "pointing": _section({
            "history_length": {"type": "integer", "minimum": 1},
            "num_samples": {"type": "integer", "minimum": 2},
            "neighborhood_radius": {"type": "integer", "minimum": 0},
            "strategy": {"type": "string", "enum": ["centroid", "interpolate"]},
        }),
        "calibration": _section({
            "homography": {
                "type": ["array", "null"],
                "minItems": 3,
                "maxItems": 3,
                "items": {
                    "type": "array",
                    "minItems": 3,
                    "maxItems": 3,
                    "items": {"type": "number"},
                },
            },
            "surface_stride": {"type": "integer", "minimum": 1},
        }),
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for prop, subschema in properties.items():
                if "default" in subschema:
                    instance.setdefault(prop, copy.deepcopy(subschema["default"]))

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema.

    Missing sections are filled in with empty mappings.

    Args:
        config: Configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        errors = list(validator.iter_errors(config))

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
