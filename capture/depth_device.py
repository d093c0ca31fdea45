"""Depth sensor abstraction consumed by the tracking pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class DepthDevice(ABC):
    """A depth sensor looking down at the tabletop.

    Coordinate conversions take and return ``(N, 3)`` float arrays. Real-world
    coordinates are right-handed millimetres: the Z axis is already flipped
    relative to the raw sensor convention.
    """

    @property
    @abstractmethod
    def width(self) -> int:
        """Depth image width in pixels."""

    @property
    @abstractmethod
    def height(self) -> int:
        """Depth image height in pixels."""

    @abstractmethod
    def wait_for_next_frame(self) -> None:
        """Block until a new depth frame is available."""

    @abstractmethod
    def read_depth_frame(self) -> np.ndarray:
        """Return the current frame as an (height, width) uint16 array in mm."""

    @abstractmethod
    def frame_id(self) -> int:
        """Return the device's identifier of the current frame."""

    @abstractmethod
    def convert_projective_to_real_world(self, points: np.ndarray) -> np.ndarray:
        """Convert (x px, y px, depth mm) points to real-world points."""

    @abstractmethod
    def convert_real_world_to_projective(self, points: np.ndarray) -> np.ndarray:
        """Convert real-world points to (x px, y px, depth mm) points."""

    @abstractmethod
    def close(self) -> None:
        """Release the device."""
