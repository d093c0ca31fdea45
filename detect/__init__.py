"""Detection module."""

from .background import BackgroundModel
from .config import DetectorConfig, HandOrientation
from .contours import extract_contours
from .fingertips import FingertipExtractor
from .regions import split_forelimb_regions

__all__ = [
    "BackgroundModel",
    "DetectorConfig",
    "FingertipExtractor",
    "HandOrientation",
    "extract_contours",
    "split_forelimb_regions",
]
