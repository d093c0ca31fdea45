"""Hand and arm-joint sub-regions from forelimb bounding boxes."""

from __future__ import annotations

from typing import List

from contracts import ForelimbFeatures, Rect
from detect.config import HandOrientation, RegionConfig


def is_forelimb_at_bottom(forelimb_bottom: int, image_bottom: int, thresh_px: int) -> bool:
    return abs(forelimb_bottom - image_bottom) < thresh_px


def split_forelimb_regions(
    features: List[ForelimbFeatures], image_height: int, config: RegionConfig
) -> List[ForelimbFeatures]:
    """Assigns hand and arm-joint regions in place.

    The region heights are fixed fractions of the image height, calibrated
    for a fully extended hand (about 15 cm) on a 92 cm deep table. Forelimbs
    shorter than the minimum hand height get no regions.

    Returns:
        The features that received a hand region.
    """
    nominal_hand_height = image_height // config.hand_max_height_scale
    min_hand_height = image_height // config.hand_min_height_scale
    arm_joint_height = image_height // config.arm_joint_height_scale

    with_hands: List[ForelimbFeatures] = []
    for ff in features:
        rect = ff.bounding_box
        if rect.height < min_hand_height or rect.is_empty():
            continue
        hand_height = min(nominal_hand_height, rect.height)

        hand_at_top = True
        if config.orientation == HandOrientation.AUTO:
            hand_at_top = is_forelimb_at_bottom(
                rect.bottom, image_height, config.bottom_dist_thresh_px
            )

        if hand_at_top:
            y_hand = rect.y
            y_arm = rect.bottom - arm_joint_height
        else:
            y_hand = rect.bottom - hand_height
            y_arm = rect.y

        ff.hand_at_top = hand_at_top
        ff.hand_region = Rect(rect.x, y_hand, rect.width, hand_height)
        if arm_joint_height > 0 and rect.height - hand_height >= arm_joint_height:
            ff.arm_joint_region = Rect(rect.x, y_arm, rect.width, arm_joint_height)
        with_hands.append(ff)
    return with_hands
