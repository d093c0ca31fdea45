import io
from pathlib import Path

import pytest

from contracts import FingerEvent, FingerEventType
from exceptions import RecordingError
from record.event_log import LOG_HEADER, FingerEventRecorder, read_event_log
from record.labels import load_labels


def _event(frame_id: int, x: float, y: float, z: float, kind=FingerEventType.PRESSED) -> FingerEvent:
    return FingerEvent(
        frame_id=frame_id,
        position_image=(x, y, z),
        position_display=(x, y),
        type=kind,
    )


def test_recorder_writes_one_line_per_frame_with_events() -> None:
    recorder = FingerEventRecorder()
    recorder.finger_pressed([])
    recorder.finger_pressed([_event(7, 10.6, 20.2, 990.9), _event(7, 30.0, 40.0, 985.0)])
    recorder.finger_pressed([_event(9, 1.0, 2.0, 3.0, FingerEventType.RELEASED)])

    out = io.StringIO()
    recorder.to_output(out)

    assert out.getvalue().splitlines() == [
        LOG_HEADER,
        "7 10 20 990 30 40 985",
        "9 1 2 3",
    ]


def test_pressed_only_recorder_drops_releases() -> None:
    recorder = FingerEventRecorder(pressed_only=True)
    recorder.finger_pressed([_event(1, 1.0, 1.0, 1.0, FingerEventType.RELEASED)])

    assert recorder.frames == []


def test_written_log_reads_back(tmp_path: Path) -> None:
    recorder = FingerEventRecorder()
    recorder.finger_pressed([_event(3, 5.0, 6.0, 700.0)])
    path = tmp_path / "logs" / "events.log"

    recorder.write(path)

    assert read_event_log(path) == {3: [(5, 6, 700)]}


def test_malformed_log_lines(tmp_path: Path) -> None:
    path = tmp_path / "bad.log"
    path.write_text(LOG_HEADER + "\n1 2 3\n")

    with pytest.raises(RecordingError):
        read_event_log(path)
    with pytest.raises(RecordingError):
        read_event_log(tmp_path / "missing.log")


def test_labels_skip_header(tmp_path: Path) -> None:
    path = tmp_path / "labels.txt"
    path.write_text("# frame-id x y ...\n4 10 20 30 40\n\n5\n6 1 2\n")

    labels = load_labels(path)

    assert labels == {4: [(10, 20), (30, 40)], 5: [], 6: [(1, 2)]}


def test_malformed_labels(tmp_path: Path) -> None:
    path = tmp_path / "labels.txt"
    path.write_text("header\n4 10\n")

    with pytest.raises(RecordingError):
        load_labels(path)
