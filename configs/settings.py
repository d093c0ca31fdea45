"""Configuration loading for the tabletop hand tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import yaml

from configs.validator import validate_config
from detect.config import (
    BackgroundConfig,
    DetectorConfig,
    FingertipConfig,
    HandOrientation,
    RegionConfig,
    SegmentationConfig,
)
from exceptions import InvalidConfigError
from log_config.logger import get_logger
from pointing.estimator import PointingConfig, PointingStrategy
from track.config import FilterMode, TrackingConfig

logger = get_logger(__name__)

Homography = Tuple[Tuple[float, float, float], Tuple[float, float, float], Tuple[float, float, float]]


@dataclass(frozen=True)
class CaptureConfig:
    width: int = 640
    height: int = 480
    flip: bool = False  # Mirror depth frames horizontally (sensor mounted reversed)


@dataclass(frozen=True)
class CalibrationConfig:
    homography: Optional[Homography] = None  # Image to display; identity when unset
    surface_stride: int = 8  # Background sampling step for the surface plane fit


@dataclass(frozen=True)
class AppConfig:
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    background: BackgroundConfig = field(default_factory=BackgroundConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    regions: RegionConfig = field(default_factory=RegionConfig)
    fingertips: FingertipConfig = field(default_factory=FingertipConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    pointing: PointingConfig = field(default_factory=PointingConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)

    def to_detector_config(self) -> DetectorConfig:
        return DetectorConfig(
            background=self.background,
            segmentation=self.segmentation,
            regions=self.regions,
            fingertips=self.fingertips,
        )


def load_config(path: Path) -> AppConfig:
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

        data = yaml.safe_load(path.read_text()) or {}
        if not isinstance(data, dict):
            raise InvalidConfigError(f"Configuration root must be a mapping: {path}")

        # Validate against JSON Schema (fills in section defaults)
        validate_config(data)

    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    return parse_config(data)


def parse_config(data: dict) -> AppConfig:
    """Build an AppConfig from an already validated mapping."""
    try:
        logger.debug("Parsing configuration sections")
        regions_data = dict(data.get("regions", {}))
        if "orientation" in regions_data:
            regions_data["orientation"] = HandOrientation(regions_data["orientation"])
        tracking_data = dict(data.get("tracking", {}))
        if "filter_mode" in tracking_data:
            tracking_data["filter_mode"] = FilterMode(tracking_data["filter_mode"])
        pointing_data = dict(data.get("pointing", {}))
        if "strategy" in pointing_data:
            pointing_data["strategy"] = PointingStrategy(pointing_data["strategy"])
        calibration_data = dict(data.get("calibration", {}))
        if calibration_data.get("homography") is not None:
            calibration_data["homography"] = tuple(
                tuple(float(v) for v in row) for row in calibration_data["homography"]
            )

        config = AppConfig(
            capture=CaptureConfig(**data.get("capture", {})),
            background=BackgroundConfig(**data.get("background", {})),
            segmentation=SegmentationConfig(**data.get("segmentation", {})),
            regions=RegionConfig(**regions_data),
            fingertips=FingertipConfig(**data.get("fingertips", {})),
            tracking=TrackingConfig(**tracking_data),
            pointing=PointingConfig(**pointing_data),
            calibration=CalibrationConfig(**calibration_data),
        )

        logger.info(
            f"Configuration loaded: {config.capture.width}x{config.capture.height}, "
            f"filter={config.tracking.filter_mode.value}, pointing={config.pointing.strategy.value}"
        )
        return config

    except (TypeError, ValueError) as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")
