"""Contour, convex hull and convexity defect extraction from foreground masks."""

from __future__ import annotations

from typing import List

import cv2
import numpy as np

from contracts import ConvexityDefect, ForelimbFeatures, Rect
from log_config.logger import get_logger

logger = get_logger(__name__)


def min_contour_perimeter(width: int, height: int, perim_scale: float) -> float:
    """Shortest contour kept, relative to the tabletop's image footprint."""
    return (width + height) / perim_scale


def extract_contours(
    mask: np.ndarray, perim_scale: float, approx_level: float = 2.0
) -> List[ForelimbFeatures]:
    """Find external contours long enough to be forelimbs.

    Args:
        mask: Binary mask (non-zero values considered foreground)
        perim_scale: contours shorter than (width + height) / perim_scale
            are dropped
        approx_level: Douglas-Peucker tolerance in pixels

    Returns:
        One ForelimbFeatures per retained contour, regions not yet assigned
    """
    mask_uint8 = (np.asarray(mask) > 0).astype(np.uint8)
    height, width = mask_uint8.shape
    min_perimeter = min_contour_perimeter(width, height, perim_scale)

    # RETR_EXTERNAL keeps only the outermost boundaries; holes are ignored.
    contours, _ = cv2.findContours(mask_uint8, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

    features: List[ForelimbFeatures] = []
    for contour in contours:
        perimeter = _pixel_edge_perimeter(contour)
        if perimeter < min_perimeter:
            continue
        approx = cv2.approxPolyDP(contour, approx_level, closed=True)
        x, y, w, h = cv2.boundingRect(approx)
        hull = cv2.convexHull(approx, clockwise=True, returnPoints=False)
        features.append(
            ForelimbFeatures(
                approx_poly=approx,
                hull=hull,
                convexity_defects=_convexity_defects(approx, hull),
                perimeter=float(perimeter),
                bounding_box=Rect(int(x), int(y), int(w), int(h)),
            )
        )
    logger.debug(f"{len(features)} of {len(contours)} contours kept (min perimeter {min_perimeter:.1f})")
    return features


def _pixel_edge_perimeter(contour: np.ndarray) -> float:
    """Perimeter along the outer pixel edges.

    arcLength runs through boundary pixel centres, half a pixel inside the
    blob on every side, so an S x S square measures 4(S - 1) instead of 4S.
    """
    return float(cv2.arcLength(contour, closed=True)) + 4.0


def _convexity_defects(approx: np.ndarray, hull: np.ndarray) -> List[ConvexityDefect]:
    if hull is None or len(approx) < 4 or len(hull) < 3:
        return []
    # convexityDefects needs monotonic hull indices.
    indices = np.sort(hull.reshape(-1)).astype(np.int32).reshape(-1, 1)
    try:
        raw = cv2.convexityDefects(approx, indices)
    except cv2.error as e:
        logger.debug(f"Convexity defects unavailable for degenerate polygon: {e}")
        return []
    if raw is None:
        return []

    points = approx.reshape(-1, 2)
    defects: List[ConvexityDefect] = []
    for start_idx, end_idx, far_idx, fixpt_depth in raw.reshape(-1, 4):
        defects.append(
            ConvexityDefect(
                start=(int(points[start_idx][0]), int(points[start_idx][1])),
                end=(int(points[end_idx][0]), int(points[end_idx][1])),
                far=(int(points[far_idx][0]), int(points[far_idx][1])),
                # OpenCV reports depth as fixed point with 8 fractional bits.
                depth=float(fixpt_depth) / 256.0,
            )
        )
    return defects
