"""
==============================================================================
QR Decoder Module
==============================================================================

Frame rasterisation and QR decoding with OpenCV and pyzbar.

Classes:
--------
- FrameBuffer: Grayscale raster reused across frames of the same size
- QRDecoder: pyzbar QR pass over a raster with an inversion policy

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import cv2
import numpy as np

from .models import CameraReadError, DecodeResult, InversionPolicy


# Module logger
logger = logging.getLogger(__name__)


class FrameDecoder(Protocol):
    def decode(
        self,
        pixels: np.ndarray,
        width: int,
        height: int,
        inversion: InversionPolicy = InversionPolicy.DONT_INVERT,
    ) -> Optional[DecodeResult]: ...


class FrameBuffer:
    """
    Off-screen grayscale raster sized to the video's native resolution.

    The buffer is reallocated only when the incoming frame size changes.

    Example:
        >>> buffer = FrameBuffer()
        >>> pixels = buffer.draw(frame)
        >>> buffer.width, buffer.height
        (1280, 720)
    """

    def __init__(self) -> None:
        self._pixels: Optional[np.ndarray] = None
        self.width = 0
        self.height = 0
        self.allocations = 0

    @property
    def pixels(self) -> Optional[np.ndarray]:
        return self._pixels

    def _ensure_size(self, width: int, height: int) -> np.ndarray:
        if self._pixels is None or width != self.width or height != self.height:
            self._pixels = np.empty((height, width), dtype=np.uint8)
            self.width = width
            self.height = height
            self.allocations += 1
            logger.debug(f"Frame buffer resized to {width}x{height}")
        return self._pixels

    def draw(self, frame: np.ndarray) -> np.ndarray:
        """
        Draw an 8-bit BGR, BGRA or grayscale frame into the buffer.

        Args:
            frame: OpenCV image (numpy array)

        Returns:
            The grayscale buffer holding the frame

        Raises:
            CameraReadError: The frame is not in a supported format
        """
        channels = self._channels(frame)
        height, width = frame.shape[:2]
        pixels = self._ensure_size(width, height)

        try:
            if channels == 1:
                np.copyto(pixels, frame.reshape(height, width))
            elif channels == 4:
                cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY, dst=pixels)
            else:
                cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY, dst=pixels)
        except cv2.error as e:
            raise CameraReadError(f"Could not convert camera frame: {e}")

        return pixels

    @staticmethod
    def _channels(frame: np.ndarray) -> int:
        if frame.dtype != np.uint8 or frame.ndim not in (2, 3) or 0 in frame.shape:
            raise CameraReadError(
                f"Unsupported camera frame: {frame.dtype} {frame.shape}"
            )
        channels = 1 if frame.ndim == 2 else frame.shape[2]
        if channels not in (1, 3, 4):
            raise CameraReadError(f"Unsupported camera frame: {channels} channels")
        return channels


class QRDecoder:
    """
    QR code decoder backed by the zbar library.

    Only the QR symbology is enabled. The inversion policy decides
    whether the inverted raster is tried as well, and in which order.

    Example:
        >>> decoder = QRDecoder()
        >>> result = decoder.decode(pixels, width, height)
        >>> result.payload if result else None
        'S-42'
    """

    def __init__(self) -> None:
        # Native zbar library, loaded on first decoder
        from pyzbar.pyzbar import ZBarSymbol, decode

        self._decode = decode
        self._symbols = [ZBarSymbol.QRCODE]

    @staticmethod
    def _candidates(
        pixels: np.ndarray,
        inversion: InversionPolicy
    ) -> List[np.ndarray]:
        if inversion == InversionPolicy.DONT_INVERT:
            return [pixels]
        inverted = cv2.bitwise_not(pixels)
        if inversion == InversionPolicy.ONLY_INVERT:
            return [inverted]
        if inversion == InversionPolicy.INVERT_FIRST:
            return [inverted, pixels]
        return [pixels, inverted]

    def decode(
        self,
        pixels: np.ndarray,
        width: int,
        height: int,
        inversion: InversionPolicy = InversionPolicy.DONT_INVERT,
    ) -> Optional[DecodeResult]:
        """
        Decode the first QR code with a non-empty payload.

        Args:
            pixels: 8-bit grayscale raster
            width: Raster width in pixels
            height: Raster height in pixels
            inversion: Polarity policy

        Returns:
            DecodeResult, or None when no code was found
        """
        if pixels is None or pixels.size == 0 or width <= 0 or height <= 0:
            return None

        for candidate in self._candidates(pixels, inversion):
            try:
                symbols = self._decode(
                    (candidate.tobytes(), width, height),
                    symbols=self._symbols
                )
            except Exception as e:
                logger.error(f"Decode error: {e}")
                return None

            for symbol in symbols:
                payload = symbol.data.decode("utf-8", errors="replace")
                if payload:
                    return DecodeResult(payload=payload)

        return None
