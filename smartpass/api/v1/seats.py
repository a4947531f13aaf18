"""
==============================================================================
Seat Endpoints
==============================================================================

Seat lookup for the student flow: scan (or type) a seat label and get
the seat details back before logging a trip.

==============================================================================
"""

from fastapi import APIRouter, Depends

from smartpass.core.dependencies import get_seat_service
from smartpass.schemas import SeatResponse
from smartpass.services import SeatService


router = APIRouter(prefix="/seats", tags=["Seats"])


class SeatController:
    """Controller for seat lookup."""

    def __init__(self, service: SeatService):
        self._service = service

    def lookup(self, seat_number: str) -> SeatResponse:
        return SeatResponse(seat=self._service.lookup(seat_number))


@router.get("/{seat_number}", response_model=SeatResponse)
def lookup_seat(seat_number: str, service: SeatService = Depends(get_seat_service)):
    """
    Look up a seat by label.

    The label is trimmed and upper-cased before the lookup.
    """
    return SeatController(service).lookup(seat_number)
