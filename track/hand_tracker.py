"""Hand event generation from per-frame Forelimb records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from calib.display_mapping import DisplayMapping, IdentityDisplayMapping
from contracts import FingerEvent, FingerEventType, Forelimb, Point3
from log_config.logger import get_logger
from track.config import FilterMode, TrackingConfig
from track.contact import ContactDebouncer

if TYPE_CHECKING:
    from calib.interaction_surface import InteractionSurface

logger = get_logger(__name__)

StreamKey = Tuple[int, int]


class HandEventListener(ABC):
    @abstractmethod
    def finger_pressed(self, events: List[FingerEvent]) -> None:
        """Receive the finger events of one processed frame (possibly empty)."""

    def finger_pointed(self, points: List[Point3]) -> None:
        """Receive the pointing intersections of one processed frame."""


class HandTracker:
    """Generates finger events and dispatches them to listeners.

    Each fingertip stream, identified by (forelimb index, fingertip index)
    within the frame, has its own ContactDebouncer. A stream missing from a
    frame counts as not in contact, so a finger that vanishes while pressed
    is released after the debounce period.
    """

    def __init__(
        self,
        display_mapping: Optional[DisplayMapping] = None,
        config: Optional[TrackingConfig] = None,
    ) -> None:
        self._mapping = display_mapping or IdentityDisplayMapping()
        self._config = config or TrackingConfig()
        self._listeners: List[HandEventListener] = []
        self._streams: Dict[StreamKey, ContactDebouncer] = {}
        self._last_positions: Dict[StreamKey, Point3] = {}

    def add_listener(self, listener: HandEventListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: HandEventListener) -> bool:
        try:
            self._listeners.remove(listener)
            return True
        except ValueError:
            return False

    def update(
        self,
        forelimbs: List[Forelimb],
        frame_id: int,
        surface: Optional["InteractionSurface"],
    ) -> List[FingerEvent]:
        """Updates forelimb information and notifies listeners of the frame's events."""
        if self._config.filter_mode == FilterMode.NONE:
            events = self.no_filter(forelimbs, frame_id)
        else:
            events = self.filter_pressed(forelimbs, frame_id, surface)
        for listener in list(self._listeners):
            listener.finger_pressed(events)
        return events

    def dispatch_pointed(self, points: List[Point3]) -> None:
        for listener in list(self._listeners):
            listener.finger_pointed(points)

    def no_filter(self, forelimbs: List[Forelimb], frame_id: int) -> List[FingerEvent]:
        return [
            self._create_event(tip, frame_id, FingerEventType.PRESSED)
            for forelimb in forelimbs
            for tip in forelimb.filtered_fingertips
        ]

    def filter_pressed(
        self,
        forelimbs: List[Forelimb],
        frame_id: int,
        surface: Optional["InteractionSurface"],
    ) -> List[FingerEvent]:
        if surface is None:
            return []
        events: List[FingerEvent] = []
        seen = set()
        for fi, forelimb in enumerate(forelimbs):
            for ti, tip in enumerate(forelimb.filtered_fingertips):
                key = (fi, ti)
                seen.add(key)
                tip_depth = tip[2] + self._config.finger_thickness_mm
                in_contact = surface.is_in_contact(tip[0], tip[1], tip_depth)
                self._last_positions[key] = tip
                debouncer = self._streams.get(key)
                if debouncer is None:
                    debouncer = ContactDebouncer(self._config.debounce_count)
                    self._streams[key] = debouncer
                transition = debouncer.update(in_contact)
                if transition is not None:
                    events.append(self._create_event(tip, frame_id, transition))

        for key in list(self._streams):
            if key in seen:
                continue
            debouncer = self._streams[key]
            transition = debouncer.update(False)
            if transition is not None:
                events.append(self._create_event(self._last_positions[key], frame_id, transition))
            if debouncer.is_idle():
                del self._streams[key]
                self._last_positions.pop(key, None)

        if events:
            logger.debug(f"Frame {frame_id}: {[e.type.value for e in events]}")
        return events

    def reset(self) -> None:
        self._streams.clear()
        self._last_positions.clear()

    def _create_event(self, tip: Point3, frame_id: int, event_type: FingerEventType) -> FingerEvent:
        return FingerEvent(
            frame_id=frame_id,
            position_image=(float(tip[0]), float(tip[1]), float(tip[2])),
            position_display=self._mapping.image_to_display(tip[0], tip[1]),
            type=event_type,
        )
