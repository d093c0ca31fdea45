"""Sliding-window filtering of tracked 3D points."""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Deque, List, Sequence

import numpy as np

from contracts import Point3


class FilterMethod(str, Enum):
    MEAN = "mean"
    MEDIAN = "median"


class FilteredPointHistory:
    """Keeps the last ``history_length`` snapshots of N tracked points.

    Each update is one snapshot holding one point per slot. With
    ``auto_resize`` the history is dropped whenever the number of points
    changes; otherwise a mismatching snapshot is rejected.
    """

    def __init__(
        self,
        history_length: int,
        method: FilterMethod = FilterMethod.MEAN,
        auto_resize: bool = True,
    ) -> None:
        if history_length <= 0:
            raise ValueError("history_length must be positive")
        self._history_length = history_length
        self._method = method
        self._auto_resize = auto_resize
        self._history: Deque[np.ndarray] = deque(maxlen=history_length)
        self._num_tracked = 0

    @property
    def num_tracked(self) -> int:
        return self._num_tracked

    def __len__(self) -> int:
        return len(self._history)

    def update(self, points: Sequence[Point3]) -> None:
        snapshot = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(snapshot) != self._num_tracked:
            if self._auto_resize or not self._history:
                self.reset(len(snapshot))
            else:
                raise ValueError(
                    f"Expected {self._num_tracked} points, got {len(snapshot)}"
                )
        self._history.append(snapshot)

    def filtered(self) -> List[Point3]:
        if not self._history:
            return []
        stack = np.stack(self._history)
        if self._method == FilterMethod.MEDIAN:
            result = np.median(stack, axis=0)
        else:
            result = stack.mean(axis=0)
        return [(float(p[0]), float(p[1]), float(p[2])) for p in result]

    def reset(self, num_tracked: int | None = None) -> None:
        """Clears the history, optionally changing the number of slots."""
        self._history.clear()
        if num_tracked is not None:
            self._num_tracked = num_tracked
