"""Per-frame forelimb detection pipeline."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

import cv2
import numpy as np

from contracts import DepthFrame, Forelimb, ForelimbFeatures
from detect.config import DetectorConfig
from detect.contours import extract_contours
from detect.fingertips import FingertipExtractor
from detect.forelimb_model import ForelimbModelEstimator
from detect.regions import split_forelimb_regions
from log_config.logger import get_logger, log_performance

if TYPE_CHECKING:
    from app.session import TrackingSession

logger = get_logger(__name__)

_MORPH_KERNEL = np.ones((3, 3), np.uint8)


@dataclass
class ProcessPacket:
    """Everything computed for one depth frame.

    ``depth_8u`` holds the background-subtracted depth scaled to 8 bits and
    ``morphed`` is its morphological opening, whose non-zero pixels are the
    cleaned foreground.
    """

    frame: DepthFrame
    foreground_mask: Optional[np.ndarray] = None
    depth_8u: Optional[np.ndarray] = None
    morphed: Optional[np.ndarray] = None
    forelimb_features: List[ForelimbFeatures] = field(default_factory=list)
    forelimbs: List[Forelimb] = field(default_factory=list)

    @property
    def frame_id(self) -> int:
        return self.frame.frame_id

    @property
    def depth(self) -> np.ndarray:
        return self.frame.depth

    @property
    def width(self) -> int:
        return self.frame.width

    @property
    def height(self) -> int:
        return self.frame.height

    @property
    def morphed_mask(self) -> np.ndarray:
        if self.morphed is None:
            return np.zeros((self.height, self.width), dtype=np.uint8)
        return self.morphed

    def clear(self) -> None:
        self.foreground_mask = None
        self.depth_8u = None
        self.morphed = None
        self.forelimb_features = []
        self.forelimbs = []


class ForelimbFeatureDetector:
    """Turns depth frames into Forelimb records.

    The first ``ignore_frames`` frames are dropped while the sensor settles,
    frames up to ``init_frames`` train the background model, and the first
    frame after that synthesizes it and derives the interaction surface.
    """

    def __init__(self, session: "TrackingSession", config: Optional[DetectorConfig] = None) -> None:
        self._session = session
        self._config = config or DetectorConfig()
        self._fingertips = FingertipExtractor(self._config.fingertips)
        self._model_estimator = ForelimbModelEstimator(session.device, self._config.fingertips)
        self._last_frame_id = -1

    def detect(self, packet: ProcessPacket) -> None:
        packet.clear()
        self._last_frame_id = packet.frame_id
        cfg = self._config.background
        background = self._session.background

        if packet.frame_id < cfg.ignore_frames:
            return
        if not background.initialized:
            if packet.frame_id < cfg.init_frames or background.count == 0:
                background.accumulate(packet.depth)
                return
            background.synthesize(cfg.low_scale, cfg.high_scale)
            logger.info(background.stats())
        if not self._session.surface_initialized():
            # Retried every frame until the device can convert the surface samples.
            self._session.init_surface()

        start = time.perf_counter()
        self._subtract_background(packet)
        self._clean_up_background(packet)
        seg = self._config.segmentation
        features = extract_contours(packet.morphed, seg.perim_scale, seg.contour_approx_level)
        packet.forelimb_features = split_forelimb_regions(
            features, packet.height, self._config.regions
        )
        for ff in packet.forelimb_features:
            ff.fingertips = self._fingertips.extract(ff, packet.depth, packet.morphed)
        self._model_estimator.update_model(packet)
        log_performance(
            f"forelimb detection frame {packet.frame_id}", (time.perf_counter() - start) * 1000.0
        )

    def is_calibrating_background(self) -> bool:
        return not self._session.background.initialized

    def recalibrate_background(self) -> None:
        self._session.recalibrate()
        self._model_estimator.reset()

    def _subtract_background(self, packet: ProcessPacket) -> None:
        background = self._session.background
        mask = background.classify(packet.depth)
        max_depth = max(background.max_depth, 1)
        scaled = np.clip(packet.depth.astype(np.int64) * 255 // max_depth, 0, 255)
        packet.foreground_mask = mask
        packet.depth_8u = np.where(mask, scaled, 0).astype(np.uint8)

    def _clean_up_background(self, packet: ProcessPacket) -> None:
        # Opening removes lone outlier pixels brighter than their neighbours.
        packet.morphed = cv2.morphologyEx(
            packet.depth_8u,
            cv2.MORPH_OPEN,
            _MORPH_KERNEL,
            iterations=self._config.segmentation.morph_iterations,
        )
