"""Per-pixel statistical model of the empty tabletop."""

from __future__ import annotations

from typing import Optional

import numpy as np

from detect.config import BackgroundConfig
from exceptions import BackgroundModelError, BackgroundNotReadyError
from log_config.logger import get_logger

logger = get_logger(__name__)


class BackgroundModel:
    """Learns an admissible depth band for every pixel of the empty table.

    Depth noise of structured-light sensors grows with the distance from the
    optical axis, so the band is the average frame-to-frame jitter of each
    pixel multiplied by a scale that widens towards the image periphery.

    Lifecycle: ``accumulate`` for N frames, ``synthesize`` once, then
    ``classify`` every frame. ``reset`` returns to the accumulation phase.
    """

    def __init__(self, width: int, height: int, config: Optional[BackgroundConfig] = None) -> None:
        self._width = width
        self._height = height
        self._config = config or BackgroundConfig()
        self._allocate()

    def _allocate(self) -> None:
        shape = (self._height, self._width)
        self._sum = np.zeros(shape, dtype=np.float32)
        self._diff_sum = np.zeros(shape, dtype=np.float32)
        self._avg: Optional[np.ndarray] = None
        self._diff: Optional[np.ndarray] = None
        self._scale: Optional[np.ndarray] = None
        self._low: Optional[np.ndarray] = None
        self._high: Optional[np.ndarray] = None
        self._count = 0
        self._avg_diff = 0.0
        self._max_depth = 0.0
        self._initialized = False

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def count(self) -> int:
        return self._count

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def max_depth(self) -> int:
        return int(self._max_depth)

    @property
    def avg_diff(self) -> float:
        """Average absolute difference before the minimum floor is applied."""
        return self._avg_diff

    @property
    def average(self) -> np.ndarray:
        self._require_initialized()
        return self._avg

    @property
    def diff(self) -> np.ndarray:
        self._require_initialized()
        return self._diff

    @property
    def scale(self) -> np.ndarray:
        self._require_initialized()
        return self._scale

    @property
    def low(self) -> np.ndarray:
        """Inclusive lower bound of the background band."""
        self._require_initialized()
        return self._low

    @property
    def high(self) -> np.ndarray:
        """Exclusive upper bound of the background band."""
        self._require_initialized()
        return self._high

    def accumulate(self, depth: np.ndarray) -> None:
        """Learns the background statistics from one more frame."""
        frame = self._as_float(depth)
        self._max_depth = max(self._max_depth, float(frame.max()))
        self._sum += frame
        self._count += 1
        running_avg = self._sum / self._count
        self._diff_sum += np.abs(frame - running_avg)

    def synthesize(self, low_scale: float, high_scale: float) -> None:
        """Builds the per-pixel bands from the accumulated statistics.

        Args:
            low_scale: scale of the average absolute difference at the image
                centre column
            high_scale: scale at the pixel farthest from the image centre

        Raises:
            BackgroundModelError: if no frame has been accumulated
        """
        if self._count == 0:
            logger.error("No background statistics are accumulated; accumulate at least one frame")
            raise BackgroundModelError("Cannot synthesize a background model from zero frames")

        if not self._initialized:
            self._avg = self._sum / self._count
            diff = self._diff_sum / self._count
            self._avg_diff = float(diff.mean())
            lo, hi = self._width // 3, self._width * 2 // 3
            if hi > lo:
                logger.debug(f"Average diff at the center column = {float(diff[:, lo:hi].mean()):.4f}")
            min_diff = self._config.min_diff_mm
            self._diff = np.where(diff < min_diff, diff + min_diff, diff).astype(np.float32)
            self._initialized = True

        self._scale = self._create_scale(low_scale, high_scale)
        tolerance = self._diff * self._scale
        self._high = self._avg + tolerance
        self._low = self._avg - tolerance
        logger.info(
            f"Background model synthesized from {self._count} frames "
            f"(scale {low_scale}..{high_scale})"
        )

    def classify(self, depth: np.ndarray) -> np.ndarray:
        """Returns a boolean mask, True where the pixel is foreground."""
        self._require_initialized()
        frame = self._as_float(depth)
        background = (frame >= self._low) & (frame < self._high)
        return ~background

    def reset(self) -> None:
        self._allocate()
        logger.info("Background model reset")

    def avg_depth(self) -> float:
        self._require_initialized()
        return float(self._avg.mean())

    def is_in_center_column(self, x: float) -> bool:
        center = (self._width - 1) / 2.0
        half_width = self._width * self._config.center_column_width_factor
        return center - half_width <= x <= center + half_width

    def stats(self) -> str:
        return "\n".join(
            [
                f"Average background depth: {self.avg_depth():f}",
                f"Average background absolute difference before adjustment: {self._avg_diff:f}",
                f"Max depth: {self._max_depth:.1f}",
            ]
        )

    def _create_scale(self, low_scale: float, high_scale: float) -> np.ndarray:
        cfg = self._config
        cx = (self._width - 1) / 2.0
        cy = (self._height - 1) / 2.0
        xs = np.arange(self._width, dtype=np.float32) - cx
        ys = np.arange(self._height, dtype=np.float32) - cy
        px_dist2 = ys[:, None] ** 2 + xs[None, :] ** 2
        camera2 = cfg.camera_distance_mm * cfg.camera_distance_mm
        dist2 = px_dist2 * cfg.mm_per_px * cfg.mm_per_px + camera2
        min_dist = camera2
        max_dist = (cx * cx + cy * cy) * cfg.mm_per_px * cfg.mm_per_px + camera2

        if max_dist - min_dist <= 0:
            return np.full((self._height, self._width), low_scale, dtype=np.float32)

        scale = (dist2 - min_dist) * (high_scale - low_scale) / (max_dist - min_dist) + low_scale
        half_width = self._width * cfg.center_column_width_factor
        center_column = np.abs(xs) <= half_width
        scale[:, center_column] = low_scale
        return scale.astype(np.float32)

    def _as_float(self, depth: np.ndarray) -> np.ndarray:
        frame = np.asarray(depth)
        if frame.shape != (self._height, self._width):
            raise ValueError(
                f"Depth frame shape {frame.shape} does not match model {(self._height, self._width)}"
            )
        return frame.astype(np.float32)

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise BackgroundNotReadyError("Background model has not been synthesized")
