import numpy as np
import pytest

from detect.config import FingertipConfig, RegionConfig
from detect.contours import extract_contours
from detect.fingertips import FingertipExtractor
from detect.regions import split_forelimb_regions

WIDTH, HEIGHT = 160, 120
HAND_DEPTH_MM = 700


def _scene(mask: np.ndarray):
    depth = np.where(mask > 0, HAND_DEPTH_MM, 0).astype(np.uint16)
    features = split_forelimb_regions(extract_contours(mask, 7.0), HEIGHT, RegionConfig())
    assert len(features) == 1
    return features[0], depth


def _two_finger_mask() -> np.ndarray:
    mask = np.zeros((HEIGHT, WIDTH), dtype=np.uint8)
    mask[60:120, 50:111] = 255  # palm and forearm, entering from the bottom
    mask[30:60, 55:65] = 255
    mask[30:60, 95:105] = 255
    return mask


def test_fingertips_at_valley_edges() -> None:
    ff, depth = _scene(_two_finger_mask())

    tips = FingertipExtractor().extract(ff, depth, _two_finger_mask())

    assert len(tips) == 2
    xs = sorted(t.position[0] for t in tips)
    # One tip per finger; which top corner depends on the hull.
    assert 55 <= xs[0] <= 64
    assert 95 <= xs[1] <= 104
    for tip in tips:
        assert tip.position[1] == pytest.approx(30, abs=2)
        assert tip.position[2] == pytest.approx(HAND_DEPTH_MM)
        assert tip.confidence == pytest.approx(1.0)
        assert tip.world is None


def test_convex_hand_falls_back_to_extreme_point() -> None:
    mask = np.zeros((HEIGHT, WIDTH), dtype=np.uint8)
    mask[40:120, 60:90] = 255
    ff, depth = _scene(mask)

    tips = FingertipExtractor().extract(ff, depth, mask)

    assert len(tips) == 1
    assert tips[0].position[1] == pytest.approx(40)
    assert tips[0].confidence == pytest.approx(0.5)


def test_shallow_defects_are_ignored() -> None:
    ff, depth = _scene(_two_finger_mask())
    extractor = FingertipExtractor(FingertipConfig(min_defect_depth_px=100.0))

    tips = extractor.extract(ff, depth, _two_finger_mask())

    assert len(tips) == 1
    assert tips[0].confidence == pytest.approx(0.5)


def test_close_candidates_merge_and_cap() -> None:
    ff, depth = _scene(_two_finger_mask())
    extractor = FingertipExtractor(FingertipConfig(merge_radius_px=50.0))

    tips = extractor.extract(ff, depth, _two_finger_mask())

    assert len(tips) == 1


def test_tip_without_depth_is_dropped() -> None:
    mask = _two_finger_mask()
    ff, _ = _scene(mask)

    tips = FingertipExtractor().extract(ff, np.zeros((HEIGHT, WIDTH), dtype=np.uint16), mask)

    assert tips == []


def test_no_hand_region_means_no_tips() -> None:
    mask = _two_finger_mask()
    ff, depth = _scene(mask)
    ff.hand_region = None

    assert FingertipExtractor().extract(ff, depth, mask) == []
