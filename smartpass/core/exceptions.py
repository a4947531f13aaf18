"""
Application Exception Handling

Single AppException class for all application errors with FastAPI integration.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Admin passcode required", "ADMIN_REQUIRED", 401)
        raise AppException("Seat not found", "SMARTPASS_API_ERROR", 502)

    Error Codes:
        Admin gate:
            - ADMIN_REQUIRED (401)
            - INVALID_PASSCODE (403)

        SmartPass endpoint:
            - API_NOT_CONFIGURED (503)
            - SMARTPASS_UNREACHABLE (502)
            - SMARTPASS_REQUEST_FAILED (502)
            - SMARTPASS_API_ERROR (502)
            - SMARTPASS_INVALID_RESPONSE (502)

        Seats and QR codes:
            - INVALID_SEAT_NUMBER (400)
            - INVALID_SEAT_RANGE (400)

        General:
            - VALIDATION_ERROR (422)
            - INTERNAL_ERROR (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "INVALID_SEAT_NUMBER")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def admin_required() -> AppException:
    """Create missing admin passcode exception."""
    return AppException("Admin passcode required", "ADMIN_REQUIRED", 401)


def invalid_passcode() -> AppException:
    """Create wrong admin passcode exception."""
    return AppException("Invalid passcode. Please try again.", "INVALID_PASSCODE", 403)


def api_not_configured() -> AppException:
    """Create SmartPass URL not configured exception."""
    return AppException(
        "SmartPass API URL is not configured. "
        "Set SMARTPASS_API_URL in your environment.",
        "API_NOT_CONFIGURED",
        503
    )


def smartpass_unreachable(reason: str) -> AppException:
    """Create transport failure exception."""
    return AppException(
        "SmartPass API is unreachable",
        "SMARTPASS_UNREACHABLE",
        502,
        {"reason": reason}
    )


def smartpass_request_failed(body: str, upstream_status: int) -> AppException:
    """Create non-2xx upstream response exception."""
    return AppException(
        body or "Request failed",
        "SMARTPASS_REQUEST_FAILED",
        502,
        {"upstream_status": upstream_status}
    )


def smartpass_api_error(message: Optional[str]) -> AppException:
    """Create exception for an envelope reporting success=false."""
    return AppException(message or "SmartPass API error", "SMARTPASS_API_ERROR", 502)


def smartpass_invalid_response(message: str) -> AppException:
    """Create exception for a malformed upstream envelope."""
    return AppException(message, "SMARTPASS_INVALID_RESPONSE", 502)


def invalid_seat_number(message: str = "QR code did not contain a seat number.") -> AppException:
    """Create invalid seat label exception."""
    return AppException(message, "INVALID_SEAT_NUMBER", 400)


def invalid_seat_range(reason: str, start: int, end: int) -> AppException:
    """Create invalid QR batch range exception."""
    return AppException(
        reason,
        "INVALID_SEAT_RANGE",
        400,
        {"start": start, "end": end}
    )
