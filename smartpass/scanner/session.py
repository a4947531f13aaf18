"""
==============================================================================
Camera Scan Session Module
==============================================================================

One camera-based QR scan attempt, from acquisition to teardown.

Lifecycle:
----------
    IDLE --start()--> PREPARING --watchdog: live track--> ACTIVE
      ^                   |                                  |
      |                   +-- acquisition failure / dead ----+
      |                   |   stream / decode / stop()       |
      +---- STOPPED <-----+----------------------------------+

STOPPED is transient; every exit path goes through stop(), which
releases the stream, cancels the pending frame tick and the watchdog,
and lands on IDLE.

Failures never raise to the caller. They are reported through the
`error` attribute and the on_error callback, and the session returns
to IDLE. Retrying is always a fresh start().

Concurrency:
------------
Everything runs on one asyncio event loop. The only suspension points
are awaiting the camera and the yield between frame ticks. A generation
counter, bumped by every start() and stop(), lets an acquisition that
resumes after being cancelled notice it is stale and release whatever
it acquired.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .decoder import FrameBuffer, FrameDecoder
from .media import MediaDevices, MediaStream, VideoSurface, has_live_video_track, release_stream
from .models import (
    CAMERA_ACCESS_FAILED,
    CAMERA_DEAD_STREAM,
    CAMERA_FRAME_ERROR,
    CAMERA_UNSUPPORTED,
    DEAD_STREAM_MESSAGE,
    FALLBACK_CONSTRAINTS,
    PREFERRED_CONSTRAINTS,
    UNSUPPORTED_MESSAGE,
    CameraError,
    InversionPolicy,
    MediaConstraints,
    ScanState,
)
from .scheduler import HostScheduler


# Module logger
logger = logging.getLogger(__name__)

SuccessCallback = Callable[[str], None]
StateCallback = Callable[[ScanState, ScanState], None]
ErrorCallback = Callable[[str, str], None]


class ScanSession:
    """
    Camera scan session reporting at most one decoded payload per start().

    Attributes:
        state: Current ScanState
        error: Last error message, None if the last start() had none

    Example:
        >>> session = ScanSession(devices, surface, QRDecoder(), scheduler)
        >>> session.start(lambda payload: print(payload))
        >>> ...
        >>> session.close()
    """

    def __init__(
        self,
        media_devices: Optional[MediaDevices],
        surface: VideoSurface,
        decoder: FrameDecoder,
        scheduler: HostScheduler,
        preferred: MediaConstraints = PREFERRED_CONSTRAINTS,
        fallback: MediaConstraints = FALLBACK_CONSTRAINTS,
        watchdog_grace: float = 1.0,
        inversion: InversionPolicy = InversionPolicy.DONT_INVERT,
        on_state_change: Optional[StateCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Initialize an idle session.

        Args:
            media_devices: Camera capability, None if the host has none
            surface: Video surface the stream is bound to
            decoder: QR decoder for rasterised frames
            scheduler: Frame tick and timer source
            preferred: First camera request
            fallback: Camera request used when the first one fails
            watchdog_grace: Seconds before the live-track check
            inversion: Decoder polarity policy
            on_state_change: Called with (previous, current) on transitions
            on_error: Called with (code, message) on failures
        """
        self._media_devices = media_devices
        self._surface = surface
        self._decoder = decoder
        self._scheduler = scheduler
        self._preferred = preferred
        self._fallback = fallback
        self._watchdog_grace = watchdog_grace
        self._inversion = inversion
        self._on_state_change = on_state_change
        self._on_error = on_error

        self._state = ScanState.IDLE
        self._stream: Optional[MediaStream] = None
        self._frame_handle = None
        self._watchdog_handle = None
        self._acquisition: Optional[asyncio.Task] = None
        self._on_success: Optional[SuccessCallback] = None
        self._buffer = FrameBuffer()

        self._generation = 0
        self._closed = False
        self._scanning = False
        self._preparing = False
        self._camera_ready = False
        self._error: Optional[str] = None
        self._error_code: Optional[str] = None
        self._decode_attempts = 0

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def error_code(self) -> Optional[str]:
        return self._error_code

    @property
    def is_scanning(self) -> bool:
        return self._scanning

    @property
    def is_preparing(self) -> bool:
        """True until the watchdog has confirmed a live feed."""
        return self._preparing

    @property
    def is_camera_ready(self) -> bool:
        return self._camera_ready

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def stream(self) -> Optional[MediaStream]:
        return self._stream

    @property
    def decode_attempts(self) -> int:
        return self._decode_attempts

    @property
    def has_pending_frame(self) -> bool:
        return self._frame_handle is not None

    @property
    def has_pending_watchdog(self) -> bool:
        return self._watchdog_handle is not None

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def start(self, on_success: SuccessCallback) -> Optional[asyncio.Task]:
        """
        Begin a scan attempt.

        Ignored while a scan is preparing or active, and after close().
        Must be called from the event loop thread.

        Args:
            on_success: Receives the decoded payload, at most once

        Returns:
            The acquisition task, or None if the call was ignored
        """
        if self._closed:
            logger.debug("start() ignored: session closed")
            return None

        if self._state in (ScanState.PREPARING, ScanState.ACTIVE):
            logger.debug(f"start() ignored: session {self._state.value}")
            return None

        if self._media_devices is None:
            self._report_error(CAMERA_UNSUPPORTED, UNSUPPORTED_MESSAGE)
            return None

        self._error = None
        self._error_code = None
        self._generation += 1
        self._on_success = on_success
        self._preparing = True
        self._transition(ScanState.PREPARING)

        logger.info("📷 Scan session starting")
        self._acquisition = asyncio.ensure_future(self._acquire(self._generation))
        return self._acquisition

    def stop(self) -> None:
        """
        Release every resource and return to IDLE.

        Idempotent and safe from any state, including after close().
        """
        if self._watchdog_handle is not None:
            self._scheduler.clear_timeout(self._watchdog_handle)
            self._watchdog_handle = None

        if self._frame_handle is not None:
            self._scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None

        # Invalidates an acquisition still waiting on the camera
        self._generation += 1

        stream, self._stream = self._stream, None
        release_stream(stream)

        self._surface.pause()
        self._surface.src_object = None

        self._scanning = False
        self._preparing = False
        self._camera_ready = False
        self._on_success = None

        if self._state is not ScanState.IDLE:
            self._transition(ScanState.STOPPED)
            self._transition(ScanState.IDLE)
            logger.info("🛑 Scan session stopped")

    def close(self) -> None:
        """Tear down for good; no callback fires after this returns."""
        self._closed = True
        self.stop()

    # =========================================================================
    # ACQUISITION
    # =========================================================================

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def _request_stream(self, generation: int) -> Optional[MediaStream]:
        try:
            return await self._media_devices.get_user_media(self._preferred)
        except Exception as e:
            logger.warning(f"Back camera unavailable, falling back to default camera: {e}")

        if not self._is_current(generation):
            return None

        return await self._media_devices.get_user_media(self._fallback)

    async def _acquire(self, generation: int) -> None:
        stream: Optional[MediaStream] = None

        try:
            stream = await self._request_stream(generation)

            if stream is None or not self._is_current(generation):
                release_stream(stream)
                return

            self._stream = stream

            surface = self._surface
            surface.src_object = stream
            surface.plays_inline = True
            surface.muted = True

            await surface.play()

            if not self._is_current(generation):
                # stop() already detached the surface
                release_stream(stream)
                return

            self._scanning = True
            self._camera_ready = True
            self._schedule_tick()
            self._watchdog_handle = self._scheduler.set_timeout(
                self._verify_stream,
                self._watchdog_grace
            )

        except Exception as e:
            if not self._is_current(generation):
                release_stream(stream)
                return

            logger.error(f"Camera error: {e}")
            release_stream(stream)
            self._report_error(CAMERA_ACCESS_FAILED, str(e) or CameraError.default_message)
            self.stop()

    # =========================================================================
    # FRAME LOOP
    # =========================================================================

    def _schedule_tick(self) -> None:
        self._frame_handle = self._scheduler.request_frame(self._tick)

    def _tick(self) -> None:
        self._frame_handle = None

        if self._closed or not self._scanning:
            return

        try:
            frame = self._surface.current_frame()
            if frame is None:
                self._schedule_tick()
                return
            pixels = self._buffer.draw(frame)
        except CameraError as e:
            logger.error(f"Frame read failed: {e}")
            self._report_error(CAMERA_FRAME_ERROR, str(e))
            self.stop()
            return

        self._decode_attempts += 1

        result = self._decoder.decode(
            pixels,
            self._buffer.width,
            self._buffer.height,
            self._inversion
        )

        if result is None or not result.payload:
            self._schedule_tick()
            return

        on_success, self._on_success = self._on_success, None
        logger.info(f"✅ QR code scanned: {result.payload!r}")

        try:
            if on_success is not None:
                on_success(result.payload)
        finally:
            self.stop()

    # =========================================================================
    # WATCHDOG
    # =========================================================================

    def _verify_stream(self) -> None:
        self._watchdog_handle = None

        if self._closed or self._state is not ScanState.PREPARING:
            return

        if not has_live_video_track(self._surface.src_object):
            logger.error("Camera stream is not active")
            self._report_error(CAMERA_DEAD_STREAM, DEAD_STREAM_MESSAGE)
            self.stop()
            return

        self._preparing = False
        self._transition(ScanState.ACTIVE)

    # =========================================================================
    # NOTIFICATIONS
    # =========================================================================

    def _report_error(self, code: str, message: str) -> None:
        self._error = message
        self._error_code = code
        if self._on_error and not self._closed:
            self._on_error(code, message)

    def _transition(self, to_state: ScanState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        if self._on_state_change and not self._closed:
            self._on_state_change(from_state, to_state)
