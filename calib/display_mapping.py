"""Mappings from depth-image pixels to display coordinates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import cv2
import numpy as np

from contracts import Point2
from exceptions import CalibrationError
from log_config.logger import get_logger

logger = get_logger(__name__)


class DisplayMapping(ABC):
    @abstractmethod
    def image_to_display(self, x: float, y: float) -> Point2:
        """Map a depth-image pixel to display coordinates."""


class IdentityDisplayMapping(DisplayMapping):
    def image_to_display(self, x: float, y: float) -> Point2:
        return (float(x), float(y))


class HomographyDisplayMapping(DisplayMapping):
    """Projective mapping given by a 3x3 homography matrix."""

    def __init__(self, matrix: Sequence[Sequence[float]] | np.ndarray) -> None:
        h = np.asarray(matrix, dtype=np.float64)
        if h.shape != (3, 3):
            raise CalibrationError(f"Homography must be 3x3, got shape {h.shape}")
        if not np.all(np.isfinite(h)) or abs(np.linalg.det(h)) < 1e-12:
            raise CalibrationError("Homography must be finite and invertible")
        self._matrix = h

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    def image_to_display(self, x: float, y: float) -> Point2:
        src = np.array([[[x, y]]], dtype=np.float64)
        dst = cv2.perspectiveTransform(src, self._matrix)
        return (float(dst[0, 0, 0]), float(dst[0, 0, 1]))

    @classmethod
    def from_correspondences(
        cls,
        image_points: Sequence[Point2],
        display_points: Sequence[Point2],
    ) -> "HomographyDisplayMapping":
        """Estimates the homography from at least four point pairs."""
        src = np.asarray(image_points, dtype=np.float64).reshape(-1, 2)
        dst = np.asarray(display_points, dtype=np.float64).reshape(-1, 2)
        if len(src) != len(dst):
            raise CalibrationError("Image and display point counts differ")
        if len(src) < 4:
            raise CalibrationError("At least 4 point pairs are required for a homography")
        matrix, _ = cv2.findHomography(src, dst, 0)
        if matrix is None:
            raise CalibrationError("Homography estimation failed (degenerate points)")
        mapping = cls(matrix)
        logger.info(
            f"Display homography from {len(src)} points, "
            f"error={mapping_error(mapping, display_points, image_points):.4f}"
        )
        return mapping


def mapping_error(
    mapping: DisplayMapping,
    display_points: Sequence[Point2],
    image_points: Sequence[Point2],
) -> float:
    """Mean squared distance between mapped image points and their display targets."""
    if len(display_points) != len(image_points):
        raise ValueError("Point lists must have the same length")
    if not image_points:
        return 0.0
    total = 0.0
    for (dx, dy), (ix, iy) in zip(display_points, image_points):
        mx, my = mapping.image_to_display(ix, iy)
        total += (mx - dx) ** 2 + (my - dy) ** 2
    return total / len(image_points)
