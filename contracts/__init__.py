"""Shared data contracts for tabletop forelimb tracking."""

from .types import (
    ConvexityDefect,
    DepthFrame,
    FingerEvent,
    FingerEventType,
    FingertipCandidate,
    Forelimb,
    ForelimbFeatures,
    Point2,
    Point3,
    Rect,
)

__all__ = [
    "ConvexityDefect",
    "DepthFrame",
    "FingerEvent",
    "FingerEventType",
    "FingertipCandidate",
    "Forelimb",
    "ForelimbFeatures",
    "Point2",
    "Point3",
    "Rect",
]
