"""
==============================================================================
Utilities Package
==============================================================================

Utility classes and functions for the application.

Modules:
--------
- validators: Seat label and seat range validation

==============================================================================
"""

from .validators import SeatNumberValidator, SeatRangeValidator

__all__ = [
    "SeatNumberValidator",
    "SeatRangeValidator",
]
