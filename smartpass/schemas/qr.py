"""
==============================================================================
Seat QR Code Schemas Module
==============================================================================

Batch QR code responses for seat label printing.

==============================================================================
"""

from typing import List

from pydantic import BaseModel, Field


class SeatQRCode(BaseModel):
    """One printable seat code as a PNG data URL."""
    seat: str
    filename: str
    data_url: str


class SeatQRBatchResponse(BaseModel):
    success: bool = True
    total: int = Field(ge=0)
    codes: List[SeatQRCode]
