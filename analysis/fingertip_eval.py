"""Fingertip detection accuracy against ground-truth labels."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, List, Sequence, Tuple

from log_config.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FingertipEvalResult:
    total_groundtruth: int
    total_detected: int
    true_pos: int
    false_pos: int
    false_neg: int
    error: float  # Mean Euclidean distance (px) over true positives
    xoffset: float  # Mean |dx| (px) over true positives
    yoffset: float  # Mean |dy| (px) over true positives

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def report(self) -> str:
        return "\n".join(
            [
                f"total fingertips in groundtruth: {self.total_groundtruth}",
                f"total fingertips in detected: {self.total_detected}",
                f"true positives: {self.true_pos}",
                f"error for true positives: {self.error:.3f}",
                f"xoffset for true positives: {self.xoffset:.3f}",
                f"yoffset for true positives: {self.yoffset:.3f}",
                f"false positives: {self.false_pos}",
                f"false negatives: {self.false_neg}",
            ]
        )


def match_frame(
    groundtruth: Sequence[Sequence[float]], detected: Sequence[Sequence[float]]
) -> List[Tuple[float, float, float]]:
    """Greedily pairs each ground-truth point with its nearest unused detection.

    Returns:
        (distance, |dx|, |dy|) for every matched pair, in ground-truth order
    """
    remaining = [(float(p[0]), float(p[1])) for p in detected]
    matches: List[Tuple[float, float, float]] = []
    for gx, gy in ((float(p[0]), float(p[1])) for p in groundtruth):
        if not remaining:
            break
        index = min(
            range(len(remaining)),
            key=lambda i: math.hypot(gx - remaining[i][0], gy - remaining[i][1]),
        )
        dx, dy = remaining.pop(index)
        matches.append((math.hypot(gx - dx, gy - dy), abs(dx - gx), abs(dy - gy)))
    return matches


def evaluate_fingertips(
    groundtruth: Dict[int, Sequence[Sequence[float]]],
    detected: Dict[int, Sequence[Sequence[float]]],
) -> FingertipEvalResult:
    """Compares detections with labels frame by frame.

    Frames present in only one of the inputs count entirely as false
    negatives (labels only) or false positives (detections only).
    """
    total_gt = total_det = true_pos = false_pos = false_neg = 0
    error = xoffset = yoffset = 0.0

    for frame_id in sorted(set(groundtruth) | set(detected)):
        gt_points = groundtruth.get(frame_id, [])
        det_points = detected.get(frame_id, [])
        total_gt += len(gt_points)
        total_det += len(det_points)
        if frame_id not in detected:
            false_neg += len(gt_points)
            logger.debug(f"false negative: {frame_id}")
            continue
        if frame_id not in groundtruth:
            false_pos += len(det_points)
            continue

        for distance, dx, dy in match_frame(gt_points, det_points):
            error += distance
            xoffset += dx
            yoffset += dy
        true_pos += min(len(gt_points), len(det_points))
        if len(gt_points) > len(det_points):
            false_neg += len(gt_points) - len(det_points)
        else:
            false_pos += len(det_points) - len(gt_points)

    if true_pos:
        error /= true_pos
        xoffset /= true_pos
        yoffset /= true_pos

    return FingertipEvalResult(
        total_groundtruth=total_gt,
        total_detected=total_det,
        true_pos=true_pos,
        false_pos=false_pos,
        false_neg=false_neg,
        error=error,
        xoffset=xoffset,
        yoffset=yoffset,
    )
