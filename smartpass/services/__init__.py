"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes sitting between the API routes and the SmartPass client.

This package provides:
- SeatService: Seat lookup plus seat/pass administration
- TripService: Trip logging and reporting
- SeatQRCodeService: Printable seat QR codes

Architecture Pattern: Service Layer
----------------------------------

    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Service      │  ← Validation and normalisation
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │ SmartPassClient │  ← Spreadsheet endpoint
    └─────────────────┘

==============================================================================
"""

from .seat_service import SeatService
from .trip_service import TripService
from .qr_service import SeatQRCodeService

__all__ = [
    "SeatService",
    "TripService",
    "SeatQRCodeService",
]
