"""
==============================================================================
Scan Session Factory
==============================================================================

Builds kiosk scan sessions (OpenCV camera, pyzbar decoder, asyncio
scheduler) from application settings.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from smartpass.config import Settings

from .decoder import QRDecoder
from .media import OpenCVMediaDevices, OpenCVVideoSurface
from .models import FacingMode, MediaConstraints
from .scheduler import AsyncioHostScheduler
from .session import ErrorCallback, ScanSession, StateCallback


# Module logger
logger = logging.getLogger(__name__)


class ScanSessionFactory:
    """
    Creates a fresh ScanSession per scan owner.

    Example:
        >>> factory = ScanSessionFactory(get_settings())
        >>> session = factory.create(on_error=print)
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @property
    def preferred_constraints(self) -> MediaConstraints:
        return MediaConstraints(
            facing_mode=FacingMode.ENVIRONMENT,
            width=self._settings.preferred_width,
            height=self._settings.preferred_height,
        )

    def create(
        self,
        on_state_change: Optional[StateCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> ScanSession:
        """Create an idle session bound to the host camera."""
        settings = self._settings

        devices = OpenCVMediaDevices(
            camera_index=settings.camera_index,
            environment_index=settings.environment_camera_index,
        )

        return ScanSession(
            media_devices=devices,
            surface=OpenCVVideoSurface(),
            decoder=QRDecoder(),
            scheduler=AsyncioHostScheduler(frame_rate=settings.frame_rate),
            preferred=self.preferred_constraints,
            watchdog_grace=settings.watchdog_grace_seconds,
            on_state_change=on_state_change,
            on_error=on_error,
        )
