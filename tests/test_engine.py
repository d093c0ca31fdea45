from typing import List

import numpy as np
import pytest

from app.engine import HandTrackingEngine
from capture.simulated_depth import SimulatedDepthDevice
from configs.settings import AppConfig, CaptureConfig
from contracts import FingerEvent, FingerEventType, Point3
from exceptions import CoordinateConversionError
from record.event_log import FingerEventRecorder
from track.hand_tracker import HandEventListener

WIDTH, HEIGHT = 160, 120
TABLE_MM = 1000
BACKGROUND_FRAMES = 60


class PointingListener(HandEventListener):
    def __init__(self) -> None:
        self.pressed: List[List[FingerEvent]] = []
        self.pointed: List[List[Point3]] = []

    def finger_pressed(self, events: List[FingerEvent]) -> None:
        self.pressed.append(events)

    def finger_pointed(self, points: List[Point3]) -> None:
        self.pointed.append(points)


def _table() -> np.ndarray:
    return np.full((HEIGHT, WIDTH), TABLE_MM, dtype=np.uint16)


def _block(depth_mm: int, x: int = 55, y: int = 40, side: int = 50) -> np.ndarray:
    frame = _table()
    frame[y:y + side, x:x + side] = depth_mm
    return frame


class FlakyConversionDevice(SimulatedDepthDevice):
    """Fails the first projective-to-world conversion."""

    def __init__(self, frames) -> None:
        super().__init__(frames)
        self.failures_left = 1

    def convert_projective_to_real_world(self, points: np.ndarray) -> np.ndarray:
        if self.failures_left:
            self.failures_left -= 1
            raise CoordinateConversionError("Sensor not ready")
        return super().convert_projective_to_real_world(points)


def _engine(frames, config: AppConfig = None) -> HandTrackingEngine:
    return HandTrackingEngine(SimulatedDepthDevice(frames), config)


def test_block_after_background_yields_one_forelimb() -> None:
    engine = _engine([_table()] * BACKGROUND_FRAMES + [_block(600)])
    listener = PointingListener()
    engine.add_listener(listener)

    packets = [engine.step() for _ in range(BACKGROUND_FRAMES)]
    assert all(p is not None and p.forelimbs == [] for p in packets)
    assert engine.is_calibrating_background()
    assert not engine.interaction_surface_initialized()

    packet = engine.step()

    assert packet.frame_id == BACKGROUND_FRAMES
    assert not engine.is_calibrating_background()
    assert engine.interaction_surface_initialized()
    assert len(packet.forelimbs) == 1
    forelimb = packet.forelimbs[0]
    box = forelimb.bounding_box
    assert (box.x, box.y) == pytest.approx((55, 40), abs=1)
    assert (box.width, box.height) == pytest.approx((50, 50), abs=1)
    assert not forelimb.hand_region.is_empty()
    assert forelimb.num_fingertips() >= 1
    assert forelimb.arm_joint_world is not None
    # A hovering block does not touch the table.
    assert listener.pressed == [[]]
    assert len(listener.pointed) == 1


def test_touching_block_presses_after_debounce() -> None:
    frames = [_table()] * BACKGROUND_FRAMES + [_block(990)] * 4
    engine = _engine(frames)
    recorder = FingerEventRecorder()
    engine.add_listener(recorder)

    for _ in range(len(frames)):
        engine.step()

    events = [e for frame_events in recorder.frames for e in frame_events]
    assert events
    assert {e.frame_id for e in events} == {BACKGROUND_FRAMES + 2}
    assert all(e.type == FingerEventType.PRESSED for e in events)
    assert engine.interaction_surface().center[2] == pytest.approx(-TABLE_MM)


def test_exhausted_device_skips_frame() -> None:
    engine = _engine([_table()] * 2)

    assert engine.step() is not None
    assert engine.step() is not None
    assert engine.step() is None
    assert not engine.is_done()


def test_recalibration_restarts_frame_ids() -> None:
    engine = _engine([_table()] * (BACKGROUND_FRAMES + 3))
    for _ in range(BACKGROUND_FRAMES + 1):
        engine.step()
    assert engine.interaction_surface_initialized()

    engine.recalibrate_background()

    assert engine.is_calibrating_background()
    assert not engine.interaction_surface_initialized()
    packet = engine.step()
    assert packet.frame_id == 1
    assert engine.session.background.count == 0


def test_flip_mirrors_frames() -> None:
    config = AppConfig(capture=CaptureConfig(width=WIDTH, height=HEIGHT, flip=True))
    engine = _engine([_table()] * BACKGROUND_FRAMES + [_block(600, x=10)], config)

    for _ in range(BACKGROUND_FRAMES):
        engine.step()
    packet = engine.step()

    assert len(packet.forelimbs) == 1
    assert packet.forelimbs[0].bounding_box.x == pytest.approx(WIDTH - 10 - 50, abs=1)


def test_release_closes_device() -> None:
    engine = _engine([_table()] * 3)
    engine.step()

    engine.release()

    assert engine.step() is None


def test_surface_setup_failure_is_retried_on_next_frame() -> None:
    frames = [_table()] * (BACKGROUND_FRAMES + 10)
    engine = HandTrackingEngine(FlakyConversionDevice(frames))

    for _ in range(BACKGROUND_FRAMES):
        engine.step()
    assert engine.step() is None
    assert not engine.is_calibrating_background()
    assert not engine.interaction_surface_initialized()

    packet = engine.step()

    assert packet is not None
    assert engine.interaction_surface_initialized()
    assert engine.interaction_surface().center[2] == pytest.approx(-TABLE_MM)
