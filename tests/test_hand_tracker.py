from typing import List

import numpy as np
import pytest

from calib.display_mapping import HomographyDisplayMapping
from calib.interaction_surface import InteractionSurface
from contracts import FingerEvent, FingerEventType, Forelimb, Point3, Rect
from track.config import FilterMode, TrackingConfig
from track.hand_tracker import HandEventListener, HandTracker

WIDTH, HEIGHT = 160, 120
TABLE_LOW_MM = 995.0


class CollectingListener(HandEventListener):
    def __init__(self) -> None:
        self.pressed: List[List[FingerEvent]] = []
        self.pointed: List[List[Point3]] = []

    def finger_pressed(self, events: List[FingerEvent]) -> None:
        self.pressed.append(events)

    def finger_pointed(self, points: List[Point3]) -> None:
        self.pointed.append(points)


def _surface() -> InteractionSurface:
    return InteractionSurface(
        center=(0.0, 0.0, -1000.0),
        normal=(0.0, 0.0, 1.0),
        contact_depth=np.full((HEIGHT, WIDTH), TABLE_LOW_MM, dtype=np.float32),
    )


def _forelimb(*tips: Point3) -> Forelimb:
    return Forelimb(
        bounding_box=Rect(40, 30, 50, 80),
        hand_region=Rect(40, 30, 50, 12),
        filtered_fingertips=list(tips),
    )


TOUCHING = (60.0, 40.0, 990.0)  # 990 + 10 mm finger thickness reaches the table band
HOVERING = (60.0, 40.0, 900.0)


def _run(tracker: HandTracker, frames: List[List[Forelimb]]) -> List[List[FingerEvent]]:
    surface = _surface()
    return [tracker.update(forelimbs, i, surface) for i, forelimbs in enumerate(frames)]


def test_press_and_release_are_debounced() -> None:
    tracker = HandTracker()
    listener = CollectingListener()
    tracker.add_listener(listener)
    frames = [[_forelimb(TOUCHING)]] * 3 + [[_forelimb(HOVERING)]] * 3

    results = _run(tracker, frames)

    fired = [(i, e.type) for i, events in enumerate(results) for e in events]
    assert fired == [(2, FingerEventType.PRESSED), (5, FingerEventType.RELEASED)]
    assert len(listener.pressed) == 6
    assert listener.pressed[2][0].frame_id == 2
    assert listener.pressed[2][0].position_image == TOUCHING


def test_vanished_finger_is_released() -> None:
    tracker = HandTracker()
    frames = [[_forelimb(TOUCHING)]] * 3 + [[]] * 3

    results = _run(tracker, frames)

    assert [e.type for e in results[2]] == [FingerEventType.PRESSED]
    assert [e.type for e in results[5]] == [FingerEventType.RELEASED]
    assert results[5][0].position_image == TOUCHING


def test_streams_are_independent() -> None:
    tracker = HandTracker()
    other = (100.0, 40.0, 990.0)
    frames = [[_forelimb(TOUCHING), _forelimb(HOVERING)]] * 2 + [[_forelimb(TOUCHING), _forelimb(other)]] * 3

    results = _run(tracker, frames)

    assert [len(events) for events in results] == [0, 0, 1, 0, 1]
    assert results[2][0].position_image == TOUCHING
    assert results[4][0].position_image == other


def test_no_filter_reports_every_tip() -> None:
    tracker = HandTracker(config=TrackingConfig(filter_mode=FilterMode.NONE))

    results = _run(tracker, [[_forelimb(HOVERING, TOUCHING)]])

    assert [e.type for e in results[0]] == [FingerEventType.PRESSED] * 2


def test_display_position_uses_mapping() -> None:
    mapping = HomographyDisplayMapping([[2.0, 0.0, 5.0], [0.0, 2.0, -5.0], [0.0, 0.0, 1.0]])
    tracker = HandTracker(mapping, TrackingConfig(debounce_count=1))

    results = _run(tracker, [[_forelimb(TOUCHING)]])

    assert results[0][0].position_display == pytest.approx((125.0, 75.0))


def test_no_surface_no_events() -> None:
    tracker = HandTracker(config=TrackingConfig(debounce_count=1))

    assert tracker.update([_forelimb(TOUCHING)], 0, None) == []


def test_listener_management_and_pointing_dispatch() -> None:
    tracker = HandTracker()
    listener = CollectingListener()
    tracker.add_listener(listener)

    tracker.dispatch_pointed([(1.0, 2.0, 3.0)])
    assert tracker.remove_listener(listener)
    assert not tracker.remove_listener(listener)
    tracker.dispatch_pointed([(4.0, 5.0, 6.0)])

    assert listener.pointed == [[(1.0, 2.0, 3.0)]]
