"""
==============================================================================
Trip Service Module
==============================================================================

Trip logging and trip reporting over the SmartPass endpoint.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List

from smartpass.client import SmartPassClient
from smartpass.schemas import TripCounts, TripLogCreate, TripRecord, TripType
from smartpass.utils.validators import SeatNumberValidator
from smartpass.core import exceptions


# Module logger
logger = logging.getLogger(__name__)


class TripService:
    """
    Service for morning/evening trip logs.

    Example:
        >>> service = TripService(client)
        >>> service.log_trip(trip)
        'Trip logged'
    """

    def __init__(self, client: SmartPassClient) -> None:
        self._client = client
        self._seat_validator = SeatNumberValidator()

    def log_trip(self, trip: TripLogCreate) -> str:
        """
        Log one trip for the seat the student confirmed.

        Args:
            trip: Validated trip submission

        Returns:
            Confirmation message from the sheet
        """
        is_valid, seat_number, error = self._seat_validator.validate(trip.seat_number)
        if not is_valid:
            raise exceptions.invalid_seat_number(error)

        trip = trip.model_copy(update={"seat_number": seat_number})
        message = self._client.log_trip(trip)

        icon = "🕘" if trip.trip_type == TripType.MORNING else "🌙"
        logger.info(f"{icon} {trip.trip_type.value} trip logged: seat {seat_number}, pass {trip.pass_id}")

        return message

    def counts(self) -> TripCounts:
        return self._client.fetch_trip_counts()

    def list_trips(self) -> List[TripRecord]:
        return self._client.fetch_trips()
