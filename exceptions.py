"""Custom exception classes for the tabletop hand tracker."""

from __future__ import annotations

from typing import Optional


class TabletopError(Exception):
    """Base exception for all tabletop tracking errors."""

    pass


class DeviceError(TabletopError):
    """Base exception for depth sensor errors."""

    def __init__(self, message: str, frame_id: Optional[int] = None):
        self.frame_id = frame_id
        super().__init__(message)


class CoordinateConversionError(DeviceError):
    """Raised when projective/real-world conversion fails."""

    pass


class CalibrationError(TabletopError):
    """Base exception for calibration-related errors."""

    pass


class BackgroundModelError(CalibrationError):
    """Raised when the background model is used against its lifecycle."""

    pass


class BackgroundNotReadyError(BackgroundModelError):
    """Raised when classifying before the background model is synthesized."""

    pass


class ConfigError(TabletopError):
    """Base exception for configuration errors."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when configuration file is invalid or corrupted."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)


class RecordingError(TabletopError):
    """Raised when an event log or label file cannot be read or written."""

    pass
