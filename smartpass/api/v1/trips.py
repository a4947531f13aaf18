"""
==============================================================================
Trip Endpoints
==============================================================================

Morning/evening trip logging for students.

==============================================================================
"""

from fastapi import APIRouter, Depends

from smartpass.core.dependencies import get_trip_service
from smartpass.schemas import TripLogCreate, TripLogResponse
from smartpass.services import TripService


router = APIRouter(prefix="/trips", tags=["Trips"])


@router.post("", response_model=TripLogResponse)
def log_trip(trip: TripLogCreate, service: TripService = Depends(get_trip_service)):
    """
    Log a trip for a confirmed seat.

    Pass ID, full name, semester and program are required.
    """
    message = service.log_trip(trip)
    return TripLogResponse(message=message, trip_type=trip.trip_type)
