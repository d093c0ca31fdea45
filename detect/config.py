from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class HandOrientation(str, Enum):
    BOTTOM = "bottom"
    AUTO = "auto"


@dataclass(frozen=True)
class BackgroundConfig:
    ignore_frames: int = 20
    init_frames: int = 60
    low_scale: float = 5.0
    high_scale: float = 6.0
    min_diff_mm: float = 1.0
    mm_per_px: float = 2.0
    camera_distance_mm: float = 1160.0
    center_column_width_factor: float = 0.2


@dataclass(frozen=True)
class SegmentationConfig:
    morph_iterations: int = 1
    contour_approx_level: float = 2.0
    # (width + height) / perim_scale is the shortest kept contour.
    perim_scale: float = 7.0


@dataclass(frozen=True)
class RegionConfig:
    hand_max_height_scale: int = 10
    hand_min_height_scale: int = 13
    arm_joint_height_scale: int = 13
    orientation: HandOrientation = HandOrientation.BOTTOM
    bottom_dist_thresh_px: int = 10


@dataclass(frozen=True)
class FingertipConfig:
    min_defect_depth_px: float = 8.0
    merge_radius_px: float = 6.0
    max_fingertips: int = 5
    depth_window_px: int = 2
    min_confidence: float = 0.0
    history_length: int = 3


@dataclass(frozen=True)
class DetectorConfig:
    background: BackgroundConfig = field(default_factory=BackgroundConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    regions: RegionConfig = field(default_factory=RegionConfig)
    fingertips: FingertipConfig = field(default_factory=FingertipConfig)
