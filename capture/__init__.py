"""Capture module."""

from .depth_device import DepthDevice
from .simulated_depth import SimulatedDepthDevice

__all__ = ["DepthDevice", "SimulatedDepthDevice"]
