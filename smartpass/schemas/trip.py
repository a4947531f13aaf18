"""
==============================================================================
Trip Schemas Module
==============================================================================

Trip log submission, trip records and daily counts.

Validation Rules for Trip Logs:
------------------------------
- trip_type: morning or evening
- pass_id, full_name: required, not blank
- semester: 1-6
- program: cse, ece, me, ce, ee, it

==============================================================================
"""

import enum
from typing import List

from pydantic import Field, field_validator

from .common import MessageResponse, SmartPassModel


class TripType(str, enum.Enum):
    """Direction of a logged trip."""
    MORNING = "morning"
    EVENING = "evening"


class Semester(str, enum.Enum):
    FIRST = "1"
    SECOND = "2"
    THIRD = "3"
    FOURTH = "4"
    FIFTH = "5"
    SIXTH = "6"


class Program(str, enum.Enum):
    """Program/branch codes."""
    CSE = "cse"
    ECE = "ece"
    ME = "me"
    CE = "ce"
    EE = "ee"
    IT = "it"


class TripLogCreate(SmartPassModel):
    """Trip submitted by a student after a seat lookup."""
    trip_type: TripType
    seat_number: str = Field(..., min_length=1, max_length=20)
    seat_position: str = Field(default="", max_length=50)
    pass_id: str = Field(..., min_length=1, max_length=50)
    full_name: str = Field(..., min_length=1, max_length=100)
    semester: Semester
    program: Program
    destination: str = Field(default="", max_length=100)
    fare_paid: bool = Field(default=False)

    @field_validator("semester", "program", mode="before")
    @classmethod
    def normalize_choice(cls, v):
        if isinstance(v, int):
            return str(v)
        if isinstance(v, str):
            return v.strip().lower()
        return v


class TripRecord(SmartPassModel):
    """Logged trip as returned by the sheet."""
    timestamp: str = Field(default="")
    trip_type: str = Field(default="")
    seat_number: str = Field(default="")
    seat_position: str = Field(default="")
    pass_id: str = Field(default="")
    name: str = Field(default="")
    semester: str = Field(default="")
    program: str = Field(default="")
    destination: str = Field(default="")
    fare_paid: bool = Field(default=False)


class TripCounts(SmartPassModel):
    """Trips logged today per direction."""
    morning: int = Field(default=0, ge=0)
    evening: int = Field(default=0, ge=0)


class TripListResponse(SmartPassModel):
    success: bool = True
    total: int = Field(ge=0)
    trips: List[TripRecord]


class TripLogResponse(MessageResponse):
    """Confirmation for a logged trip."""
    trip_type: TripType


class TripCountsResponse(SmartPassModel):
    success: bool = True
    counts: TripCounts
