"""Fingertip candidates from convexity defects of the hand region."""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from contracts import FingertipCandidate, ForelimbFeatures, Rect
from detect.config import FingertipConfig

_FALLBACK_CONFIDENCE = 0.5


class FingertipExtractor:
    """Ranks hull vertices of the hand region as fingertip candidates.

    A finger is a convex spike between two finger valleys, so the hull
    vertices bounding a deep convexity defect are likely fingertips. The
    deeper the valley, the higher the confidence. When the hand shows no
    valleys (a fist or a single pointing finger) the hull point farthest
    towards the hand side of the forelimb is used instead.
    """

    def __init__(self, config: Optional[FingertipConfig] = None) -> None:
        self._config = config or FingertipConfig()

    def extract(
        self, features: ForelimbFeatures, depth: np.ndarray, mask: np.ndarray
    ) -> List[FingertipCandidate]:
        region = features.hand_region
        if region is None or region.is_empty():
            return []

        raw = self._defect_candidates(features, region)
        if not raw:
            fallback = self._extreme_candidate(features, region)
            if fallback is not None:
                raw = [fallback]

        tips: List[FingertipCandidate] = []
        for (x, y), confidence in self._merge(raw):
            z = self._tip_depth(x, y, depth, mask)
            if z is None:
                continue
            tips.append(FingertipCandidate(position=(float(x), float(y), z), confidence=confidence))
            if len(tips) >= self._config.max_fingertips:
                break
        return tips

    def _defect_candidates(
        self, features: ForelimbFeatures, region: Rect
    ) -> List[Tuple[Tuple[int, int], float]]:
        min_depth = self._config.min_defect_depth_px
        out = []
        for defect in features.convexity_defects:
            if defect.depth < min_depth:
                continue
            confidence = min(1.0, defect.depth / (2.0 * min_depth))
            for point in (defect.start, defect.end):
                if region.contains(*point):
                    out.append((point, confidence))
        return out

    def _extreme_candidate(
        self, features: ForelimbFeatures, region: Rect
    ) -> Optional[Tuple[Tuple[int, int], float]]:
        points = np.asarray(features.approx_poly).reshape(-1, 2)
        hull = np.asarray(features.hull).reshape(-1)
        inside = [tuple(int(v) for v in points[i]) for i in hull if region.contains(*points[i])]
        if not inside:
            return None
        if features.hand_at_top:
            tip = min(inside, key=lambda p: p[1])
        else:
            tip = max(inside, key=lambda p: p[1])
        return tip, _FALLBACK_CONFIDENCE

    def _merge(
        self, candidates: List[Tuple[Tuple[int, int], float]]
    ) -> List[Tuple[Tuple[int, int], float]]:
        radius2 = self._config.merge_radius_px ** 2
        kept: List[Tuple[Tuple[int, int], float]] = []
        for point, confidence in sorted(candidates, key=lambda c: c[1], reverse=True):
            if any(
                (point[0] - p[0]) ** 2 + (point[1] - p[1]) ** 2 <= radius2 for p, _ in kept
            ):
                continue
            kept.append((point, confidence))
        return kept

    def _tip_depth(
        self, x: int, y: int, depth: np.ndarray, mask: np.ndarray
    ) -> Optional[float]:
        r = self._config.depth_window_px
        height, width = depth.shape
        y1, y2 = max(y - r, 0), min(y + r + 1, height)
        x1, x2 = max(x - r, 0), min(x + r + 1, width)
        window = depth[y1:y2, x1:x2]
        valid = (window > 0) & (mask[y1:y2, x1:x2] > 0)
        if not valid.any():
            valid = window > 0
            if not valid.any():
                return None
        return float(np.median(window[valid]))
