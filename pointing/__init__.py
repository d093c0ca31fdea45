"""Pointing gesture estimation."""

from .estimator import PointingConfig, PointingEstimator, PointingStrategy
from .geometry import fit_line, fit_plane, line_plane_intersection

__all__ = [
    "PointingConfig",
    "PointingEstimator",
    "PointingStrategy",
    "fit_line",
    "fit_plane",
    "line_plane_intersection",
]
