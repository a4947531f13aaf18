"""
==============================================================================
Scanner Package - Camera QR Scanning
==============================================================================

Camera scan sessions with OpenCV capture and pyzbar decoding.

Classes:
--------
- ScanSession: One scan attempt (acquire, decode loop, watchdog, teardown)
- ScanSessionFactory: Builds kiosk sessions from settings
- QRDecoder / FrameBuffer: Frame rasterisation and QR decoding

==============================================================================
"""

from .decoder import FrameBuffer, QRDecoder
from .factory import ScanSessionFactory
from .models import DecodeResult, InversionPolicy, MediaConstraints, ScanState
from .session import ScanSession

__all__ = [
    "DecodeResult",
    "FrameBuffer",
    "InversionPolicy",
    "MediaConstraints",
    "QRDecoder",
    "ScanSession",
    "ScanSessionFactory",
    "ScanState",
]
