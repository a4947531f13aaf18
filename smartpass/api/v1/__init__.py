"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- seats: Seat lookup
- trips: Trip logging
- admin: Seat, pass and trip administration, seat QR codes

==============================================================================
"""

from . import health, seats, trips, admin

__all__ = ["health", "seats", "trips", "admin"]
