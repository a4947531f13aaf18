"""
==============================================================================
Validation Utilities Module
==============================================================================

Validation classes for seat labels and seat ranges.

This module implements:
- SeatNumberValidator: Normalises scanned or typed seat labels
- SeatRangeValidator: Validates seat ranges for batch QR generation

Rules for Seat Labels:
---------------------
- Surrounding whitespace is ignored
- Blank labels are rejected
- At most 20 characters
- Stored upper-case

==============================================================================
"""

from __future__ import annotations

from typing import Optional, Tuple


class SeatNumberValidator:
    """
    Validator for seat labels decoded from QR codes or typed manually.

    Example:
        >>> validator = SeatNumberValidator()
        >>> is_valid, normalized, error = validator.validate("  s-42 ")
        >>> print(normalized)
        'S-42'
    """

    MAX_LENGTH = 20

    def validate(self, raw_value: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Validate and normalize a seat label.

        Args:
            raw_value: Raw QR payload or manual entry

        Returns:
            Tuple of (is_valid, normalized_label, error_message)
        """
        if not raw_value:
            return False, None, "QR code did not contain a seat number."

        cleaned = raw_value.strip()

        if not cleaned:
            return False, None, "QR code did not contain a seat number."

        if len(cleaned) > self.MAX_LENGTH:
            return False, None, f"Seat number must be at most {self.MAX_LENGTH} characters"

        return True, cleaned.upper(), None


class SeatRangeValidator:
    """
    Validator for numeric seat ranges used by batch QR generation.

    The span end - start may not exceed the configured limit.
    """

    def __init__(self, limit: int = 50) -> None:
        self._limit = limit

    def validate(self, start: int, end: int) -> Tuple[bool, Optional[str]]:
        """
        Validate a seat range.

        Args:
            start: First seat number (inclusive)
            end: Last seat number (inclusive)

        Returns:
            Tuple of (is_valid, error_message)
        """
        if start < 1 or end < 1 or start > end:
            return False, "Please enter valid seat numbers"

        if end - start > self._limit:
            return False, f"Maximum {self._limit} seats at a time"

        return True, None
