"""
==============================================================================
Seat Service Module
==============================================================================

Seat lookup and seat administration over the SmartPass endpoint.

This module implements:
- SeatService: Resolves scanned/typed seat labels to seat records
- Seat and pass administration passthroughs

Lookup Flow:
-----------
    QR payload / manual entry
            │
    ┌───────▼────────┐
    │ SeatNumber     │  trim + upper-case, blank rejected
    │ Validator      │
    └───────┬────────┘
            │
    ┌───────▼────────┐
    │ getSeat action │
    └────────────────┘

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List

from smartpass.client import SmartPassClient
from smartpass.core import exceptions
from smartpass.schemas import PassRecord, SeatRecord
from smartpass.utils.validators import SeatNumberValidator


# Module logger
logger = logging.getLogger(__name__)


class SeatService:
    """
    Seat lookup and administration.

    Attributes:
        _client: SmartPass API client
        _validator: Seat label validator

    Example:
        >>> service = SeatService(client)
        >>> seat = service.lookup(" s-42 ")
        >>> print(seat.seat_number)
        'S-42'
    """

    def __init__(self, client: SmartPassClient) -> None:
        """
        Initialize the seat service.

        Args:
            client: SmartPass API client
        """
        self._client = client
        self._validator = SeatNumberValidator()

    def normalize(self, raw_value: str) -> str:
        """
        Normalize a seat label.

        Raises:
            AppException: INVALID_SEAT_NUMBER if blank or too long
        """
        is_valid, normalized, error = self._validator.validate(raw_value)
        if not is_valid:
            raise exceptions.invalid_seat_number(error)
        return normalized

    def lookup(self, raw_value: str) -> SeatRecord:
        """
        Resolve a scanned or typed seat label.

        Args:
            raw_value: QR payload or manual entry

        Returns:
            SeatRecord from the SmartPass sheet
        """
        seat_number = self.normalize(raw_value)
        seat = self._client.fetch_seat(seat_number)
        logger.info(f"💺 Seat {seat.seat_number} ready to log")
        return seat

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    def list_seats(self) -> List[SeatRecord]:
        return self._client.fetch_seats()

    def add_seat(self, seat: SeatRecord) -> str:
        seat = seat.model_copy(update={"seat_number": self.normalize(seat.seat_number)})
        message = self._client.create_seat(seat)
        logger.info(f"➕ Seat {seat.seat_number} saved")
        return message

    def delete_seat(self, raw_value: str) -> str:
        seat_number = self.normalize(raw_value)
        message = self._client.remove_seat(seat_number)
        logger.info(f"🗑️ Seat {seat_number} deleted")
        return message

    def list_passes(self) -> List[PassRecord]:
        return self._client.fetch_passes()

    def add_pass(self, bus_pass: PassRecord) -> str:
        message = self._client.create_pass(bus_pass)
        logger.info(f"➕ Pass {bus_pass.pass_id} saved")
        return message

    def delete_pass(self, pass_id: str) -> str:
        message = self._client.remove_pass(pass_id.strip())
        logger.info(f"🗑️ Pass {pass_id.strip()} deleted")
        return message
