"""Simulated depth sensor backend for pipeline testing."""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np

from exceptions import CoordinateConversionError, DeviceError

from .depth_device import DepthDevice


class SimulatedDepthDevice(DepthDevice):
    """Replays scripted depth frames through a pinhole camera model.

    The projection follows the usual structured-light convention: image y
    grows downwards while real-world Y points up, and real-world Z is the
    negated depth so the frame is right-handed.
    """

    def __init__(
        self,
        frames: Iterable[np.ndarray],
        focal_length_px: float = 575.8,
        cx: Optional[float] = None,
        cy: Optional[float] = None,
    ) -> None:
        self._frames: List[np.ndarray] = [np.asarray(f, dtype=np.uint16) for f in frames]
        if not self._frames:
            raise DeviceError("Simulated device needs at least one frame")
        self._height, self._width = self._frames[0].shape
        self._focal = float(focal_length_px)
        self._cx = float(cx) if cx is not None else (self._width - 1) / 2.0
        self._cy = float(cy) if cy is not None else (self._height - 1) / 2.0
        self._index = -1
        self._closed = False

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def wait_for_next_frame(self) -> None:
        if self._closed:
            raise DeviceError("Device is closed")
        if self._index + 1 >= len(self._frames):
            raise DeviceError("No more frames", frame_id=self._index)
        self._index += 1

    def read_depth_frame(self) -> np.ndarray:
        if self._index < 0:
            raise DeviceError("No frame has been received yet")
        return self._frames[self._index].copy()

    def frame_id(self) -> int:
        return self._index

    def convert_projective_to_real_world(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        z = pts[:, 2]
        out = np.empty_like(pts)
        out[:, 0] = (pts[:, 0] - self._cx) * z / self._focal
        out[:, 1] = (self._cy - pts[:, 1]) * z / self._focal
        out[:, 2] = -z
        return out

    def convert_real_world_to_projective(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        z = -pts[:, 2]
        if np.any(z <= 0):
            raise CoordinateConversionError("Point lies at or behind the sensor plane")
        out = np.empty_like(pts)
        out[:, 0] = pts[:, 0] * self._focal / z + self._cx
        out[:, 1] = self._cy - pts[:, 1] * self._focal / z
        out[:, 2] = z
        return out

    def close(self) -> None:
        self._closed = True
