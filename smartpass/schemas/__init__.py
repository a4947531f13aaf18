"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas and the camelCase record base
- Seat: Seat records
- Passes: Bus pass records
- Trip: Trip log submission, trip records and counts
- QR: Seat QR code batches

==============================================================================
"""

from .common import SmartPassModel, MessageResponse
from .seat import SeatRecord, SeatResponse, SeatListResponse
from .passes import PassRecord, PassListResponse
from .qr import SeatQRCode, SeatQRBatchResponse
from .trip import (
    Program,
    Semester,
    TripCounts,
    TripCountsResponse,
    TripListResponse,
    TripLogCreate,
    TripLogResponse,
    TripRecord,
    TripType,
)

__all__ = [
    # Common
    "SmartPassModel",
    "MessageResponse",
    # Seat
    "SeatRecord",
    "SeatResponse",
    "SeatListResponse",
    # Passes
    "PassRecord",
    "PassListResponse",
    # QR codes
    "SeatQRCode",
    "SeatQRBatchResponse",
    # Trip
    "Program",
    "Semester",
    "TripCounts",
    "TripCountsResponse",
    "TripListResponse",
    "TripLogCreate",
    "TripLogResponse",
    "TripRecord",
    "TripType",
]
