"""Core data contracts for depth capture, forelimb detection and hand events."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

Point2 = Tuple[float, float]
Point3 = Tuple[float, float, float]


@dataclass(frozen=True)
class DepthFrame:
    frame_id: int
    depth: Any
    width: int
    height: int


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom


@dataclass(frozen=True)
class ConvexityDefect:
    start: Tuple[int, int]
    end: Tuple[int, int]
    far: Tuple[int, int]
    depth: float


@dataclass(frozen=True)
class FingertipCandidate:
    """A fingertip hypothesis.

    ``position`` is projective (x px, y px, depth mm); ``world`` is the
    right-handed real-world point in mm when a device conversion was available.
    """

    position: Point3
    confidence: float
    world: Optional[Point3] = None


@dataclass
class ForelimbFeatures:
    """Image features of one retained contour for the current frame."""

    approx_poly: Any
    hull: Any
    convexity_defects: List[ConvexityDefect]
    perimeter: float
    bounding_box: Rect
    hand_region: Optional[Rect] = None
    arm_joint_region: Optional[Rect] = None
    hand_at_top: bool = True
    fingertips: List[FingertipCandidate] = field(default_factory=list)


@dataclass
class Forelimb:
    bounding_box: Rect
    hand_region: Rect
    arm_joint_region: Optional[Rect] = None
    fingertips: List[FingertipCandidate] = field(default_factory=list)
    filtered_fingertips: List[Point3] = field(default_factory=list)
    arm_joint: Optional[Point3] = None
    arm_joint_world: Optional[Point3] = None

    def num_fingertips(self) -> int:
        return len(self.fingertips)

    def fingertips_world(self) -> List[Point3]:
        return [tip.world for tip in self.fingertips if tip.world is not None]


class FingerEventType(str, Enum):
    PRESSED = "PRESSED"
    RELEASED = "RELEASED"


@dataclass(frozen=True)
class FingerEvent:
    frame_id: int
    position_image: Point3
    position_display: Point2
    type: FingerEventType
