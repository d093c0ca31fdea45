"""Plain-text finger event log.

The log starts with the header ``# frame-id x y z x y z ...`` followed by one
line per frame that produced events: the frame id and then the integer image
position (x, y, depth) of every event in that frame.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, TextIO, Tuple

from contracts import FingerEvent, FingerEventType
from exceptions import RecordingError
from log_config.logger import get_logger
from track.hand_tracker import HandEventListener

logger = get_logger(__name__)

LOG_HEADER = "# frame-id x y z x y z ..."

LoggedPoint = Tuple[int, int, int]


class FingerEventRecorder(HandEventListener):
    """Collects finger events per frame for writing to a log file.

    With ``pressed_only`` set, RELEASED events are not recorded.
    """

    def __init__(self, pressed_only: bool = False) -> None:
        self._pressed_only = pressed_only
        self._frames: List[List[FingerEvent]] = []

    @property
    def frames(self) -> List[List[FingerEvent]]:
        return [list(events) for events in self._frames]

    def finger_pressed(self, events: List[FingerEvent]) -> None:
        if self._pressed_only:
            events = [e for e in events if e.type == FingerEventType.PRESSED]
        if events:
            self._frames.append(list(events))

    def to_output(self, stream: TextIO) -> None:
        stream.write(LOG_HEADER + "\n")
        for events in self._frames:
            fields = [str(events[0].frame_id)]
            for event in events:
                x, y, z = event.position_image
                fields.extend((str(int(x)), str(int(y)), str(int(z))))
            stream.write(" ".join(fields) + "\n")

    def write(self, path: Path) -> None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w") as f:
                self.to_output(f)
        except OSError as e:
            logger.error(f"Failed to write event log {path}: {e}")
            raise RecordingError(f"Failed to write event log {path}: {e}") from e
        logger.info(f"Wrote {len(self._frames)} event frames to {path}")

    def clear(self) -> None:
        self._frames = []


def read_event_log(path: Path) -> Dict[int, List[LoggedPoint]]:
    """Reads an event log into frame id -> image points, in file order."""
    path = Path(path)
    if not path.exists():
        raise RecordingError(f"Event log not found: {path}")
    frames: Dict[int, List[LoggedPoint]] = {}
    with path.open() as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                values = [int(v) for v in line.split()]
            except ValueError as e:
                raise RecordingError(f"{path}:{line_no}: non-integer value") from e
            if (len(values) - 1) % 3 != 0:
                raise RecordingError(f"{path}:{line_no}: expected frame id followed by x y z triples")
            points = frames.setdefault(values[0], [])
            for i in range(1, len(values), 3):
                points.append((values[i], values[i + 1], values[i + 2]))
    return frames
