"""
==============================================================================
Admin Endpoints
==============================================================================

Seat, pass and trip administration plus seat QR code printing.

Every route requires the X-Admin-Passcode header.

==============================================================================
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from smartpass.core.dependencies import (
    get_qr_service,
    get_seat_service,
    get_trip_service,
    require_admin,
)
from smartpass.schemas import (
    MessageResponse,
    PassListResponse,
    PassRecord,
    SeatListResponse,
    SeatQRBatchResponse,
    SeatRecord,
    TripCountsResponse,
    TripListResponse,
)
from smartpass.services import SeatQRCodeService, SeatService, TripService


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


class AdminController:
    """Controller for admin operations."""

    def __init__(self, seats: SeatService = None, trips: TripService = None):
        self._seats = seats
        self._trips = trips

    def list_seats(self) -> SeatListResponse:
        seats = self._seats.list_seats()
        return SeatListResponse(total=len(seats), seats=seats)

    def add_seat(self, seat: SeatRecord) -> MessageResponse:
        return MessageResponse(message=self._seats.add_seat(seat))

    def delete_seat(self, seat_number: str) -> MessageResponse:
        return MessageResponse(message=self._seats.delete_seat(seat_number))

    def list_passes(self) -> PassListResponse:
        passes = self._seats.list_passes()
        return PassListResponse(total=len(passes), passes=passes)

    def add_pass(self, bus_pass: PassRecord) -> MessageResponse:
        return MessageResponse(message=self._seats.add_pass(bus_pass))

    def delete_pass(self, pass_id: str) -> MessageResponse:
        return MessageResponse(message=self._seats.delete_pass(pass_id))

    def list_trips(self) -> TripListResponse:
        trips = self._trips.list_trips()
        return TripListResponse(total=len(trips), trips=trips)

    def trip_counts(self) -> TripCountsResponse:
        return TripCountsResponse(counts=self._trips.counts())


# =============================================================================
# SEATS
# =============================================================================

@router.get("/seats", response_model=SeatListResponse)
def list_seats(service: SeatService = Depends(get_seat_service)):
    """List all seats."""
    return AdminController(seats=service).list_seats()


@router.post("/seats", response_model=MessageResponse)
def add_seat(seat: SeatRecord, service: SeatService = Depends(get_seat_service)):
    """Register a seat."""
    return AdminController(seats=service).add_seat(seat)


@router.delete("/seats/{seat_number}", response_model=MessageResponse)
def delete_seat(seat_number: str, service: SeatService = Depends(get_seat_service)):
    """Delete a seat."""
    return AdminController(seats=service).delete_seat(seat_number)


# =============================================================================
# PASSES
# =============================================================================

@router.get("/passes", response_model=PassListResponse)
def list_passes(service: SeatService = Depends(get_seat_service)):
    """List all bus passes."""
    return AdminController(seats=service).list_passes()


@router.post("/passes", response_model=MessageResponse)
def add_pass(bus_pass: PassRecord, service: SeatService = Depends(get_seat_service)):
    """Issue a bus pass."""
    return AdminController(seats=service).add_pass(bus_pass)


@router.delete("/passes/{pass_id}", response_model=MessageResponse)
def delete_pass(pass_id: str, service: SeatService = Depends(get_seat_service)):
    """Revoke a bus pass."""
    return AdminController(seats=service).delete_pass(pass_id)


# =============================================================================
# TRIPS
# =============================================================================

@router.get("/trips", response_model=TripListResponse)
def list_trips(service: TripService = Depends(get_trip_service)):
    """List logged trips."""
    return AdminController(trips=service).list_trips()


@router.get("/trips/counts", response_model=TripCountsResponse)
def trip_counts(service: TripService = Depends(get_trip_service)):
    """Morning and evening trip counts."""
    return AdminController(trips=service).trip_counts()


# =============================================================================
# QR CODES
# =============================================================================

@router.get("/qr", response_model=SeatQRBatchResponse)
def generate_qr_batch(
    start: int = Query(..., ge=1),
    end: int = Query(..., ge=1),
    service: SeatQRCodeService = Depends(get_qr_service)
):
    """QR codes for seats start..end as PNG data URLs."""
    codes = service.generate_batch(start, end)
    return SeatQRBatchResponse(total=len(codes), codes=codes)


@router.get("/qr/{seat_number}.png", response_class=Response)
def generate_qr(seat_number: str, service: SeatQRCodeService = Depends(get_qr_service)):
    """QR code PNG for a single seat."""
    png = service.generate_png(seat_number)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="seat-{seat_number}-qr.png"'}
    )
