"""Ground-truth fingertip label files.

A label file has one header line followed by lines of
``frame-id x y x y ...``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from exceptions import RecordingError

LabelPoint = Tuple[int, int]


def load_labels(path: Path) -> Dict[int, List[LabelPoint]]:
    path = Path(path)
    if not path.exists():
        raise RecordingError(f"Label file not found: {path}")
    labels: Dict[int, List[LabelPoint]] = {}
    with path.open() as f:
        lines = f.read().splitlines()
    for line_no, line in enumerate(lines[1:], start=2):
        line = line.strip()
        if not line:
            continue
        try:
            values = [int(v) for v in line.split()]
        except ValueError as e:
            raise RecordingError(f"{path}:{line_no}: non-integer value") from e
        if (len(values) - 1) % 2 != 0:
            raise RecordingError(f"{path}:{line_no}: expected frame id followed by x y pairs")
        points = labels.setdefault(values[0], [])
        for i in range(1, len(values), 2):
            points.append((values[i], values[i + 1]))
    return labels
