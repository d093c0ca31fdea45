"""Calibration module."""

from .display_mapping import (
    DisplayMapping,
    HomographyDisplayMapping,
    IdentityDisplayMapping,
    mapping_error,
)
from .interaction_surface import InteractionSurface

__all__ = [
    "DisplayMapping",
    "HomographyDisplayMapping",
    "IdentityDisplayMapping",
    "InteractionSurface",
    "mapping_error",
]
