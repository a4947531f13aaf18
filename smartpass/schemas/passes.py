"""
==============================================================================
Pass Schemas Module
==============================================================================

Student bus passes as stored in the SmartPass sheet.

==============================================================================
"""

from typing import List

from pydantic import Field

from .common import SmartPassModel


class PassRecord(SmartPassModel):
    """One issued bus pass."""
    pass_id: str = Field(..., min_length=1, max_length=50)
    student_name: str = Field(default="")
    issue_date: str = Field(default="")
    expiry_date: str = Field(default="")
    pass_type: str = Field(default="")
    is_active: bool = Field(default=True)


class PassListResponse(SmartPassModel):
    success: bool = True
    total: int = Field(ge=0)
    passes: List[PassRecord]
