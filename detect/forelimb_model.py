"""Assembles per-frame Forelimb records from detected forelimb features."""

from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

import numpy as np

from capture.depth_device import DepthDevice
from contracts import FingertipCandidate, Forelimb, ForelimbFeatures, Point3, Rect
from detect.config import FingertipConfig
from track.filtered_points import FilteredPointHistory

if TYPE_CHECKING:
    from detect.forelimb_detector import ProcessPacket


class ForelimbModelEstimator:
    def __init__(self, device: Optional[DepthDevice], config: Optional[FingertipConfig] = None) -> None:
        self._device = device
        self._config = config or FingertipConfig()
        self._tip_filters: List[FilteredPointHistory] = []

    def update_model(self, packet: "ProcessPacket") -> None:
        forelimbs: List[Forelimb] = []
        for ff in packet.forelimb_features:
            if ff.hand_region is None:
                continue
            forelimbs.append(self._build_forelimb(ff, packet.depth, packet.morphed_mask))
        self._filter_fingertips(forelimbs)
        packet.forelimbs = forelimbs

    def reset(self) -> None:
        self._tip_filters = []

    def _build_forelimb(
        self, ff: ForelimbFeatures, depth: np.ndarray, mask: np.ndarray
    ) -> Forelimb:
        tips = [t for t in ff.fingertips if t.confidence >= self._config.min_confidence]
        tips = self._with_world(tips)
        arm_joint = self.arm_joint_position(ff.arm_joint_region, depth, mask)
        arm_joint_world = None
        if arm_joint is not None and self._device is not None:
            arm_joint_world = _as_point(
                self._device.convert_projective_to_real_world(np.array([arm_joint]))[0]
            )
        return Forelimb(
            bounding_box=ff.bounding_box,
            hand_region=ff.hand_region,
            arm_joint_region=ff.arm_joint_region,
            fingertips=tips,
            arm_joint=arm_joint,
            arm_joint_world=arm_joint_world,
        )

    @staticmethod
    def arm_joint_position(
        region: Optional[Rect], depth: np.ndarray, mask: np.ndarray
    ) -> Optional[Point3]:
        """Centroid (x, y, mean depth) of foreground pixels in the arm-joint region."""
        if region is None or region.is_empty():
            return None
        window = depth[region.y:region.bottom, region.x:region.right]
        valid = (mask[region.y:region.bottom, region.x:region.right] > 0) & (window > 0)
        if not valid.any():
            return None
        ys, xs = np.nonzero(valid)
        return (
            float(xs.mean() + region.x),
            float(ys.mean() + region.y),
            float(window[valid].mean()),
        )

    def _with_world(self, tips: List[FingertipCandidate]) -> List[FingertipCandidate]:
        if not tips or self._device is None:
            return tips
        world = self._device.convert_projective_to_real_world(
            np.array([t.position for t in tips], dtype=np.float64)
        )
        return [
            FingertipCandidate(position=t.position, confidence=t.confidence, world=_as_point(w))
            for t, w in zip(tips, world)
        ]

    def _filter_fingertips(self, forelimbs: List[Forelimb]) -> None:
        if len(self._tip_filters) != len(forelimbs):
            self._tip_filters = [
                FilteredPointHistory(self._config.history_length) for _ in forelimbs
            ]
        for forelimb, history in zip(forelimbs, self._tip_filters):
            if not forelimb.fingertips:
                history.reset(0)
                continue
            history.update([t.position for t in forelimb.fingertips])
            forelimb.filtered_fingertips = history.filtered()


def _as_point(values) -> Point3:
    return (float(values[0]), float(values[1]), float(values[2]))
