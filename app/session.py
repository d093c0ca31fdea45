"""Tracking session: owns the background model and the interaction surface."""

from __future__ import annotations

from typing import Optional

from calib.interaction_surface import InteractionSurface
from capture.depth_device import DepthDevice
from detect.background import BackgroundModel
from detect.config import BackgroundConfig
from log_config.logger import get_logger

logger = get_logger(__name__)


class TrackingSession:
    """Calibration state shared by one run of the frame loop.

    The session is the only owner of the background model and the interaction
    surface. Frame processing reads them, and only ``init_surface``,
    ``recalibrate`` and ``release`` mutate them, between frames.
    """

    def __init__(
        self,
        width: int,
        height: int,
        device: Optional[DepthDevice] = None,
        config: Optional[BackgroundConfig] = None,
        surface_stride: int = 8,
    ) -> None:
        self._config = config or BackgroundConfig()
        self._device = device
        self._surface_stride = surface_stride
        self.background = BackgroundModel(width, height, self._config)
        self._surface: Optional[InteractionSurface] = None

    @property
    def device(self) -> Optional[DepthDevice]:
        return self._device

    @property
    def surface(self) -> Optional[InteractionSurface]:
        return self._surface

    def surface_initialized(self) -> bool:
        return self._surface is not None

    def init_surface(self) -> InteractionSurface:
        if self._surface is not None:
            logger.warning("Interaction surface already initialized; re-deriving it")
        self._surface = InteractionSurface.from_background(
            self.background, self._device, stride=self._surface_stride
        )
        return self._surface

    def clear_surface(self) -> None:
        self._surface = None

    def recalibrate(self) -> None:
        """Drops the learned background and surface so accumulation starts over."""
        self.background.reset()
        self.clear_surface()
        logger.info("Background recalibrating")

    def release(self) -> None:
        self.clear_surface()
        self.background.reset()
        logger.info("Tracking session released")
