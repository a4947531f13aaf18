"""
==============================================================================
Seat Schemas Module
==============================================================================

Seat records as stored in the SmartPass sheet.

==============================================================================
"""

from typing import List

from pydantic import Field

from .common import SmartPassModel


class SeatRecord(SmartPassModel):
    """One bus seat."""
    seat_number: str = Field(..., min_length=1, max_length=20)
    position: str = Field(default="")
    status: str = Field(default="")
    section: str = Field(default="")
    row: str = Field(default="")
    available: bool = Field(default=True)


class SeatResponse(SmartPassModel):
    success: bool = True
    seat: SeatRecord


class SeatListResponse(SmartPassModel):
    success: bool = True
    total: int = Field(ge=0)
    seats: List[SeatRecord]
