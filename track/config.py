from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from track.contact import DEBOUNCE_COUNT


class FilterMode(str, Enum):
    DEBOUNCE = "debounce"
    # Every filtered fingertip is reported as PRESSED each frame; for logging raw data.
    NONE = "none"


@dataclass(frozen=True)
class TrackingConfig:
    debounce_count: int = DEBOUNCE_COUNT
    finger_thickness_mm: float = 10.0
    filter_mode: FilterMode = FilterMode.DEBOUNCE
