"""
==============================================================================
Seat QR Code Service Module
==============================================================================

Generates the printable QR codes stuck on bus seats.

Each code carries the bare seat label as its payload, which is exactly
what the scan session hands to the seat lookup.

==============================================================================
"""

from __future__ import annotations

import base64
import io
import logging
from typing import List, Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from smartpass.config import Settings, get_settings
from smartpass.core import exceptions
from smartpass.schemas import SeatQRCode
from smartpass.utils.validators import SeatNumberValidator, SeatRangeValidator


# Module logger
logger = logging.getLogger(__name__)


class SeatQRCodeService:
    """
    PNG QR code generator for seat labels.

    Example:
        >>> service = SeatQRCodeService()
        >>> png = service.generate_png("S-42")
        >>> codes = service.generate_batch(1, 10)
        >>> codes[0].seat
        '1'
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._seat_validator = SeatNumberValidator()
        self._range_validator = SeatRangeValidator(self._settings.qr_batch_limit)

    def generate_png(self, seat: str) -> bytes:
        """
        Render one seat label as a PNG image.

        Raises:
            AppException: INVALID_SEAT_NUMBER for a blank label
        """
        is_valid, seat_number, error = self._seat_validator.validate(seat)
        if not is_valid:
            raise exceptions.invalid_seat_number(error)

        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_M,
            box_size=self._settings.qr_box_size,
            border=self._settings.qr_border,
        )
        qr.add_data(seat_number)
        qr.make(fit=True)

        image = qr.make_image(
            fill_color=self._settings.qr_dark_color,
            back_color=self._settings.qr_light_color,
        )

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def generate_data_url(self, seat: str) -> str:
        encoded = base64.b64encode(self.generate_png(seat)).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def generate_batch(self, start: int, end: int) -> List[SeatQRCode]:
        """
        Render QR codes for every seat number in start..end.

        Args:
            start: First seat number (inclusive)
            end: Last seat number (inclusive)

        Returns:
            One SeatQRCode per seat, in order
        """
        is_valid, error = self._range_validator.validate(start, end)
        if not is_valid:
            raise exceptions.invalid_seat_range(error, start, end)

        codes = [
            SeatQRCode(
                seat=str(number),
                filename=f"seat-{number}-qr.png",
                data_url=self.generate_data_url(str(number)),
            )
            for number in range(start, end + 1)
        ]

        logger.info(f"🔳 Generated {len(codes)} QR codes")
        return codes
