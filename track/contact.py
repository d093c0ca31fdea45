"""Debounced finger contact state machine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from contracts import FingerEventType

DEBOUNCE_COUNT = 3


class ContactState(str, Enum):
    RELEASED = "RELEASED"
    PRESSED = "PRESSED"


@dataclass
class ContactDebouncer:
    """Turns per-frame contact observations into press/release transitions.

    A transition needs ``debounce_count`` consecutive observations that
    disagree with the current state; any interruption restarts the count.
    """

    debounce_count: int = DEBOUNCE_COUNT
    state: ContactState = ContactState.RELEASED
    pressed_count: int = 0
    released_count: int = 0

    def update(self, in_contact: bool) -> Optional[FingerEventType]:
        if in_contact:
            self.pressed_count += 1
            self.released_count = 0
        else:
            self.released_count += 1
            self.pressed_count = 0

        if self.state == ContactState.RELEASED and self.pressed_count >= self.debounce_count:
            self.state = ContactState.PRESSED
            return FingerEventType.PRESSED
        if self.state == ContactState.PRESSED and self.released_count >= self.debounce_count:
            self.state = ContactState.RELEASED
            return FingerEventType.RELEASED
        return None

    def is_idle(self) -> bool:
        """True once released with no contact run in progress."""
        return self.state == ContactState.RELEASED and self.pressed_count == 0

    def reset(self) -> None:
        self.state = ContactState.RELEASED
        self.pressed_count = 0
        self.released_count = 0
