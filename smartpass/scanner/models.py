"""
==============================================================================
Scanner Models
==============================================================================

Value types shared by the scan session and its platform adapters.

==============================================================================
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class ScanState(str, enum.Enum):
    """
    Lifecycle states of a scan session.

    STOPPED is transient: stop() passes through it and lands on IDLE.
    """
    IDLE = "idle"
    PREPARING = "preparing"
    ACTIVE = "active"
    STOPPED = "stopped"


class TrackReadyState(str, enum.Enum):
    """Ready state of a single media track."""
    LIVE = "live"
    ENDED = "ended"


class MediaReadyState(enum.IntEnum):
    """Buffering state of a video surface (HTML media numbering)."""
    HAVE_NOTHING = 0
    HAVE_METADATA = 1
    HAVE_CURRENT_DATA = 2
    HAVE_FUTURE_DATA = 3
    HAVE_ENOUGH_DATA = 4


class InversionPolicy(str, enum.Enum):
    """Which colour polarities the QR decoder tries."""
    DONT_INVERT = "dontInvert"
    ONLY_INVERT = "onlyInvert"
    ATTEMPT_BOTH = "attemptBoth"
    INVERT_FIRST = "invertFirst"


class FacingMode(str, enum.Enum):
    USER = "user"
    ENVIRONMENT = "environment"


@dataclass(frozen=True)
class MediaConstraints:
    """
    Camera request constraints.

    Attributes:
        facing_mode: Preferred camera direction, None for any camera
        width: Preferred capture width, None for device default
        height: Preferred capture height, None for device default
        audio: Whether an audio track is requested (always False here)
    """
    facing_mode: Optional[FacingMode] = None
    width: Optional[int] = None
    height: Optional[int] = None
    audio: bool = False


PREFERRED_CONSTRAINTS = MediaConstraints(
    facing_mode=FacingMode.ENVIRONMENT,
    width=1280,
    height=720,
)

FALLBACK_CONSTRAINTS = MediaConstraints()


@dataclass(frozen=True)
class DecodeResult:
    """Text payload of one successfully decoded QR code."""
    payload: str


# =============================================================================
# ERRORS
# =============================================================================

class CameraError(Exception):
    """Base class for camera capability failures."""

    default_message = "Camera access denied"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class CameraUnavailableError(CameraError):
    """No camera device could be opened."""
    default_message = "Requested camera is not available"


class CameraPermissionError(CameraError):
    """Access to the camera was refused."""
    default_message = "Camera access denied"


class CameraReadError(CameraError):
    """A live camera stopped delivering frames."""
    default_message = "Camera stopped delivering frames"


# Side-channel error codes reported by ScanSession
CAMERA_UNSUPPORTED = "CAMERA_UNSUPPORTED"
CAMERA_ACCESS_FAILED = "CAMERA_ACCESS_FAILED"
CAMERA_DEAD_STREAM = "CAMERA_DEAD_STREAM"
CAMERA_FRAME_ERROR = "CAMERA_FRAME_ERROR"

UNSUPPORTED_MESSAGE = "Camera access is not supported on this device."
DEAD_STREAM_MESSAGE = "Camera preview failed to load. Please retry."
