"""Interaction surface plane derived from the frozen background model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from capture.depth_device import DepthDevice
from contracts import Point3
from detect.background import BackgroundModel
from exceptions import BackgroundNotReadyError
from log_config.logger import get_logger
from pointing.geometry import fit_plane

logger = get_logger(__name__)


@dataclass(frozen=True)
class InteractionSurface:
    """The tabletop plane in real-world coordinates plus its per-pixel contact band.

    ``contact_depth`` is the inclusive lower band of the background model: a
    point whose depth reaches it is touching the table.
    """

    center: Optional[Point3]
    normal: Point3
    contact_depth: np.ndarray

    def is_in_contact(self, x: float, y: float, depth: float) -> bool:
        height, width = self.contact_depth.shape
        xi = min(max(int(x), 0), width - 1)
        yi = min(max(int(y), 0), height - 1)
        return bool(depth >= self.contact_depth[yi, xi])

    @classmethod
    def from_background(
        cls,
        background: BackgroundModel,
        device: Optional[DepthDevice],
        stride: int = 8,
    ) -> "InteractionSurface":
        """Fits the surface plane to a grid of background depth samples.

        The normal points towards the sensor. The center is left undefined when
        no device is available or too few valid samples exist.
        """
        if not background.initialized:
            raise BackgroundNotReadyError("Interaction surface needs a synthesized background")

        avg = background.average
        contact_depth = background.low.copy()
        default_normal: Point3 = (0.0, 0.0, 1.0)
        if device is None:
            logger.warning("No depth device; interaction surface center is undefined")
            return cls(center=None, normal=default_normal, contact_depth=contact_depth)

        ys, xs = np.mgrid[0:background.height:stride, 0:background.width:stride]
        depths = avg[ys, xs]
        valid = depths > 0
        projective = np.stack(
            [xs[valid].astype(np.float64), ys[valid].astype(np.float64), depths[valid].astype(np.float64)],
            axis=1,
        )
        plane = None
        if len(projective) >= 3:
            plane = fit_plane(device.convert_projective_to_real_world(projective))
        if plane is None:
            logger.warning("Too few background samples to fit the interaction surface")
            return cls(center=None, normal=default_normal, contact_depth=contact_depth)

        center, normal = plane
        # Sensor sits at the world origin.
        if np.dot(normal, -center) < 0:
            normal = -normal
        surface = cls(
            center=(float(center[0]), float(center[1]), float(center[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            contact_depth=contact_depth,
        )
        logger.info(f"Interaction surface center={surface.center} normal={surface.normal}")
        return surface
