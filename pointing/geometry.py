"""3D line and plane fitting used by the pointing estimator and surface calibration."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from contracts import Point3

_EPS = 1e-9


def fit_line(points: Sequence[Point3]) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """Total least squares line fit.

    Minimizes perpendicular distances rather than a vertical residual, so the
    fit is unbiased for lines in any orientation.

    Returns:
        (point on line, unit direction), or None for fewer than two distinct
        points
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if len(pts) < 2 or not np.all(np.isfinite(pts)):
        return None
    centroid = pts.mean(axis=0)
    centered = pts - centroid
    if np.linalg.norm(centered) < _EPS:
        return None
    _, _, vt = np.linalg.svd(centered, full_matrices=False)
    direction = vt[0]
    norm = np.linalg.norm(direction)
    if norm < _EPS:
        return None
    return centroid, direction / norm


def fit_plane(points: Sequence[Point3]) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """Least squares plane through the points.

    Returns:
        (centroid, unit normal), or None for fewer than three non-collinear
        points
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if len(pts) < 3 or not np.all(np.isfinite(pts)):
        return None
    centroid = pts.mean(axis=0)
    _, s, vt = np.linalg.svd(pts - centroid, full_matrices=False)
    if s[1] < _EPS:
        return None
    normal = vt[-1]
    return centroid, normal / np.linalg.norm(normal)


def line_plane_intersection(
    line_point: np.ndarray,
    line_direction: np.ndarray,
    plane_point: np.ndarray,
    plane_normal: np.ndarray,
) -> Optional[Point3]:
    """Intersection of a line and a plane, None if parallel or degenerate."""
    p0 = np.asarray(line_point, dtype=np.float64)
    d = np.asarray(line_direction, dtype=np.float64)
    c = np.asarray(plane_point, dtype=np.float64)
    n = np.asarray(plane_normal, dtype=np.float64)
    denom = float(np.dot(d, n))
    if abs(denom) < _EPS * max(np.linalg.norm(d) * np.linalg.norm(n), 1.0):
        return None
    t = float(np.dot(c - p0, n)) / denom
    hit = p0 + t * d
    if not np.all(np.isfinite(hit)):
        return None
    return (float(hit[0]), float(hit[1]), float(hit[2]))

