from typing import List, Optional

from contracts import FingerEventType
from track.contact import DEBOUNCE_COUNT, ContactDebouncer, ContactState


def _run(stream: List[bool]) -> List[Optional[FingerEventType]]:
    debouncer = ContactDebouncer()
    return [debouncer.update(in_contact) for in_contact in stream]


def test_press_then_release_fire_on_debounce_frames() -> None:
    stream = [True] * DEBOUNCE_COUNT + [False] * 5

    events = _run(stream)

    fired = [(i, e) for i, e in enumerate(events) if e is not None]
    assert fired == [(2, FingerEventType.PRESSED), (5, FingerEventType.RELEASED)]


def test_short_blip_produces_no_events() -> None:
    events = _run([True, True] + [False] * 5)

    assert all(e is None for e in events)


def test_interruption_restarts_count() -> None:
    events = _run([True, True, False, True, True, True])

    fired = [i for i, e in enumerate(events) if e is not None]
    assert fired == [5]


def test_flicker_while_pressed_does_not_release() -> None:
    events = _run([True] * 3 + [False, False, True] + [False] * 2)

    assert [e for e in events if e is not None] == [FingerEventType.PRESSED]


def test_idle_and_reset() -> None:
    debouncer = ContactDebouncer(debounce_count=2)
    assert debouncer.is_idle()

    debouncer.update(True)
    assert not debouncer.is_idle()
    debouncer.update(True)
    assert debouncer.state == ContactState.PRESSED

    debouncer.reset()
    assert debouncer.state == ContactState.RELEASED
    assert debouncer.is_idle()
