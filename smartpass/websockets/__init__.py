"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers for camera seat scanning.

Handlers:
---------
- scanner: Drives a kiosk scan session and resolves the scanned seat

==============================================================================
"""

from .scanner import router as scanner_router

__all__ = ["scanner_router"]
