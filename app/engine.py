"""Hand tracking engine: the frame loop behind every front end."""

from __future__ import annotations

from typing import List, Optional

import cv2

from app.session import TrackingSession
from calib.display_mapping import DisplayMapping, HomographyDisplayMapping, IdentityDisplayMapping
from calib.interaction_surface import InteractionSurface
from capture.depth_device import DepthDevice
from configs.settings import AppConfig
from contracts import DepthFrame, Point3
from detect.forelimb_detector import ForelimbFeatureDetector, ProcessPacket
from exceptions import DeviceError
from log_config.logger import get_logger
from pointing.estimator import PointingEstimator
from track.hand_tracker import HandEventListener, HandTracker

logger = get_logger(__name__)


class HandTrackingEngine:
    """Steps a depth device one frame at a time and notifies hand event listeners.

    Frame ids handed to the pipeline are relative to the last background
    recalibration, so the ignore and init windows restart after a
    recalibration.
    """

    def __init__(
        self,
        device: DepthDevice,
        config: Optional[AppConfig] = None,
        display_mapping: Optional[DisplayMapping] = None,
    ) -> None:
        self._device = device
        self._config = config or AppConfig()
        self._width = device.width
        self._height = device.height
        if (self._width, self._height) != (self._config.capture.width, self._config.capture.height):
            logger.info(
                f"Using device resolution {self._width}x{self._height} "
                f"instead of configured {self._config.capture.width}x{self._config.capture.height}"
            )

        self._session = TrackingSession(
            self._width,
            self._height,
            device=device,
            config=self._config.background,
            surface_stride=self._config.calibration.surface_stride,
        )
        self._detector = ForelimbFeatureDetector(self._session, self._config.to_detector_config())
        self._tracker = HandTracker(
            display_mapping or _display_mapping_from(self._config),
            self._config.tracking,
        )
        self._pointing = PointingEstimator(device, self._config.pointing)

        self._prev_frame_id = -1
        self._current_frame_id = -1
        self._frame_id_offset = 0
        logger.info(f"Hand tracking engine started ({self._width}x{self._height})")

    @property
    def depth_width(self) -> int:
        return self._width

    @property
    def depth_height(self) -> int:
        return self._height

    @property
    def session(self) -> TrackingSession:
        return self._session

    def step(self) -> Optional[ProcessPacket]:
        """Processes the next depth frame.

        Returns:
            The frame's ProcessPacket, or None when the device failed and the
            frame was skipped
        """
        try:
            self._device.wait_for_next_frame()
            depth = self._device.read_depth_frame()
            if self._config.capture.flip:
                depth = cv2.flip(depth, 1)
            self._prev_frame_id = self._current_frame_id
            frame_id = self.get_depth_frame_id()
            packet = ProcessPacket(
                DepthFrame(frame_id=frame_id, depth=depth, width=self._width, height=self._height)
            )
            self._detector.detect(packet)
        except DeviceError as e:
            logger.warning(f"Skipping frame: {e}")
            return None

        surface = self._session.surface
        if surface is not None:
            self._tracker.update(packet.forelimbs, packet.frame_id, surface)
            self._tracker.dispatch_pointed(self._pointed(packet, surface))
        return packet

    def _pointed(self, packet: ProcessPacket, surface: InteractionSurface) -> List[Point3]:
        try:
            return self._pointing.update(packet.forelimbs, packet.morphed_mask, packet.depth, surface)
        except DeviceError as e:
            logger.warning(f"Pointing estimation failed on frame {packet.frame_id}: {e}")
            return []

    def reset_depth_frame_id(self) -> None:
        self._frame_id_offset = self._current_frame_id

    def get_depth_frame_id(self) -> int:
        self._current_frame_id = self._device.frame_id()
        return self._current_frame_id - self._frame_id_offset

    def is_done(self) -> bool:
        """True when the device's frame id went backwards, i.e. a recording looped."""
        return self._current_frame_id < self._prev_frame_id

    def recalibrate_background(self) -> None:
        self.reset_depth_frame_id()
        self._detector.recalibrate_background()
        self._tracker.reset()
        self._pointing.reset()

    def is_calibrating_background(self) -> bool:
        return self._detector.is_calibrating_background()

    def interaction_surface_initialized(self) -> bool:
        return self._session.surface_initialized()

    def interaction_surface(self) -> Optional[InteractionSurface]:
        return self._session.surface

    def add_listener(self, listener: HandEventListener) -> None:
        self._tracker.add_listener(listener)

    def remove_listener(self, listener: HandEventListener) -> bool:
        return self._tracker.remove_listener(listener)

    def release(self) -> None:
        self._device.close()
        self._session.release()
        logger.info("Hand tracking engine released")


def _display_mapping_from(config: AppConfig) -> DisplayMapping:
    if config.calibration.homography is None:
        return IdentityDisplayMapping()
    return HomographyDisplayMapping(config.calibration.homography)
