"""Pointing ray estimation from the forearm through the fingertips."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

import numpy as np

from capture.depth_device import DepthDevice
from contracts import Forelimb, Point3
from log_config.logger import get_logger
from pointing.geometry import fit_line, line_plane_intersection
from track.filtered_points import FilteredPointHistory

if TYPE_CHECKING:
    from calib.interaction_surface import InteractionSurface

logger = get_logger(__name__)


class PointingStrategy(str, Enum):
    # Interior samples are the real-world mean of nearby foreground pixels.
    CENTROID = "centroid"
    # Interior samples are the interpolated projective points converted directly.
    INTERPOLATE = "interpolate"


@dataclass(frozen=True)
class PointingConfig:
    history_length: int = 5
    num_samples: int = 10
    neighborhood_radius: int = 3
    strategy: PointingStrategy = PointingStrategy.CENTROID


class PointingEstimator:
    """Intersects a forearm-to-fingertip ray with the interaction surface.

    For every forelimb with fingertips and an arm joint, the mean fingertip
    and the arm joint are smoothed over time, the segment between them is
    sampled in image space, a 3D line is fitted to the samples and the
    line's intersection with the surface plane is reported.
    """

    def __init__(self, device: DepthDevice, config: Optional[PointingConfig] = None) -> None:
        self._device = device
        self._config = config or PointingConfig()
        if self._config.num_samples < 2:
            raise ValueError("num_samples must be at least 2")
        self._fingertips = FilteredPointHistory(self._config.history_length)
        self._arm_joints = FilteredPointHistory(self._config.history_length)

    def update(
        self,
        forelimbs: List[Forelimb],
        mask: np.ndarray,
        depth: np.ndarray,
        surface: Optional["InteractionSurface"],
    ) -> List[Point3]:
        if surface is None or surface.center is None:
            return []

        tips: List[Point3] = []
        arms: List[Point3] = []
        for forelimb in forelimbs:
            world_tips = forelimb.fingertips_world()
            if not world_tips or forelimb.arm_joint_world is None:
                continue
            tips.append(tuple(np.mean(np.asarray(world_tips, dtype=np.float64), axis=0)))
            arms.append(forelimb.arm_joint_world)

        self._fingertips.update(tips)
        self._arm_joints.update(arms)
        if not tips:
            return []

        filtered_tips = self._fingertips.filtered()
        filtered_arms = self._arm_joints.filtered()
        plane_point = np.asarray(surface.center, dtype=np.float64)
        plane_normal = np.asarray(surface.normal, dtype=np.float64)

        intersections: List[Point3] = []
        for tip, arm in zip(filtered_tips, filtered_arms):
            samples = self._sample_ray(arm, tip, mask, depth)
            line = fit_line(samples)
            if line is None:
                continue
            hit = line_plane_intersection(line[0], line[1], plane_point, plane_normal)
            if hit is not None:
                intersections.append(hit)
        if intersections:
            logger.debug(f"Pointing intersections: {intersections}")
        return intersections

    def reset(self) -> None:
        self._fingertips.reset(0)
        self._arm_joints.reset(0)

    def _sample_ray(
        self, arm: Point3, tip: Point3, mask: np.ndarray, depth: np.ndarray
    ) -> List[Point3]:
        ends = self._device.convert_real_world_to_projective(
            np.array([arm, tip], dtype=np.float64)
        )
        start, end = ends[0], ends[1]
        n = self._config.num_samples
        samples: List[Point3] = [arm]
        for i in range(1, n - 1):
            p = start + (end - start) * (i / (n - 1))
            world = None
            if self._config.strategy == PointingStrategy.CENTROID:
                world = self._neighborhood_centroid(int(round(p[0])), int(round(p[1])), mask, depth)
            if world is None:
                world = self._device.convert_projective_to_real_world(p.reshape(1, 3))[0]
            samples.append((float(world[0]), float(world[1]), float(world[2])))
        samples.append(tip)
        return samples

    def _neighborhood_centroid(
        self, x: int, y: int, mask: np.ndarray, depth: np.ndarray
    ) -> Optional[np.ndarray]:
        r = self._config.neighborhood_radius
        height, width = depth.shape
        x0, x1 = max(x - r, 0), min(x + r + 1, width)
        y0, y1 = max(y - r, 0), min(y + r + 1, height)
        if x0 >= x1 or y0 >= y1:
            return None
        window = depth[y0:y1, x0:x1]
        valid = (mask[y0:y1, x0:x1] > 0) & (window > 0)
        if not np.any(valid):
            return None
        ys, xs = np.nonzero(valid)
        projective = np.stack(
            [xs + x0, ys + y0, window[valid]], axis=1
        ).astype(np.float64)
        world = self._device.convert_projective_to_real_world(projective)
        return world.mean(axis=0)
