"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the SmartPass client, services, scan session
factory and the admin passcode gate.

Dependency Hierarchy:
--------------------
                    ┌──────────────────────┐
                    │ get_smartpass_client │
                    └──────────┬───────────┘
                               │
            ┌──────────────────┼──────────────────┐
            │                  │                  │
    ┌───────▼───────┐  ┌───────▼───────┐  ┌───────▼──────────┐
    │get_seat_svc   │  │get_trip_svc   │  │require_admin     │
    └───────────────┘  └───────────────┘  │(X-Admin-Passcode)│
                                          └──────────────────┘

Usage Examples:
--------------
    @router.get("/seats/{seat}")
    async def lookup(seat: str, service: SeatService = Depends(get_seat_service)):
        ...

    @router.get("/admin/trips", dependencies=[Depends(require_admin)])
    async def trips(...):
        ...

==============================================================================
"""

from __future__ import annotations

import hmac
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from smartpass.client import SmartPassClient
from smartpass.config import get_settings
from smartpass.core import exceptions
from smartpass.scanner import ScanSessionFactory
from smartpass.services import SeatQRCodeService, SeatService, TripService


# Module logger
logger = logging.getLogger(__name__)


class AdminGate:
    """
    Passcode check guarding the admin routes.

    The passcode travels in the X-Admin-Passcode header and is compared
    in constant time against the configured value.

    Example:
        >>> gate = AdminGate("s3cret-pass")
        >>> gate.verify("s3cret-pass")
    """

    def __init__(self, passcode: str) -> None:
        self._passcode = passcode

    def verify(self, supplied: Optional[str]) -> None:
        """
        Verify a supplied passcode.

        Raises:
            AppException: ADMIN_REQUIRED if missing, INVALID_PASSCODE if wrong
        """
        if supplied is None or not supplied.strip():
            raise exceptions.admin_required()

        if not hmac.compare_digest(supplied.strip().encode(), self._passcode.encode()):
            logger.warning("Rejected admin request: invalid passcode")
            raise exceptions.invalid_passcode()


# =============================================================================
# CLIENT & SERVICES
# =============================================================================

@lru_cache(maxsize=1)
def get_smartpass_client() -> SmartPassClient:
    """Shared SmartPass client built from settings."""
    settings = get_settings()
    return SmartPassClient(
        settings.smartpass_api_url,
        timeout=settings.api_timeout_seconds
    )


def get_seat_service(
    client: SmartPassClient = Depends(get_smartpass_client)
) -> SeatService:
    return SeatService(client)


def get_trip_service(
    client: SmartPassClient = Depends(get_smartpass_client)
) -> TripService:
    return TripService(client)


def get_qr_service() -> SeatQRCodeService:
    return SeatQRCodeService(get_settings())


def get_scan_session_factory() -> ScanSessionFactory:
    return ScanSessionFactory(get_settings())


# =============================================================================
# ADMIN GATE
# =============================================================================

async def require_admin(
    x_admin_passcode: Optional[str] = Header(default=None)
) -> None:
    """
    Require the admin passcode header.

    Raises:
        AppException: ADMIN_REQUIRED (401) or INVALID_PASSCODE (403)
    """
    AdminGate(get_settings().admin_passcode).verify(x_admin_passcode)
