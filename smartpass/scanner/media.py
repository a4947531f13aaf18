"""
==============================================================================
Media Capture Module
==============================================================================

Camera capability and video surface used by the scan session.

The session only talks to the protocols below. The OpenCV classes are the
kiosk implementation:

- OpenCVMediaDevices: opens cv2.VideoCapture devices for a constraint set
- OpenCVMediaStream / OpenCVVideoTrack: own the opened capture
- OpenCVVideoSurface: binds a stream and hands out the current frame

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol

import cv2
import numpy as np

from .models import (
    CameraPermissionError,
    CameraReadError,
    CameraUnavailableError,
    FacingMode,
    MediaConstraints,
    MediaReadyState,
    TrackReadyState,
)


# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# PROTOCOLS
# =============================================================================

class VideoTrack(Protocol):
    kind: str

    @property
    def ready_state(self) -> TrackReadyState: ...

    def stop(self) -> None: ...


class MediaStream(Protocol):
    def get_tracks(self) -> List[VideoTrack]: ...

    def get_video_tracks(self) -> List[VideoTrack]: ...


class MediaDevices(Protocol):
    async def get_user_media(self, constraints: MediaConstraints) -> MediaStream: ...


class VideoSurface(Protocol):
    src_object: Optional[MediaStream]
    muted: bool
    plays_inline: bool

    @property
    def ready_state(self) -> MediaReadyState: ...

    async def play(self) -> None: ...

    def pause(self) -> None: ...

    def current_frame(self) -> Optional[np.ndarray]: ...


def release_stream(stream: Optional[MediaStream]) -> None:
    """Stop every track of a stream. Safe to call more than once."""
    if stream is None:
        return
    for track in stream.get_tracks():
        track.stop()


def has_live_video_track(stream: Optional[MediaStream]) -> bool:
    """True if the stream has at least one video track reporting live."""
    if stream is None:
        return False
    return any(
        track.ready_state == TrackReadyState.LIVE
        for track in stream.get_video_tracks()
    )


# =============================================================================
# OPENCV IMPLEMENTATION
# =============================================================================

class OpenCVVideoTrack:
    """
    Video track backed by an opened cv2.VideoCapture.

    The track owns the capture; stop() releases the device.
    """

    kind = "video"

    def __init__(self, capture: cv2.VideoCapture, device_index: int) -> None:
        self._capture = capture
        self._device_index = device_index
        self._stopped = False

    @property
    def device_index(self) -> int:
        return self._device_index

    @property
    def ready_state(self) -> TrackReadyState:
        if self._stopped or not self._capture.isOpened():
            return TrackReadyState.ENDED
        return TrackReadyState.LIVE

    def read(self) -> Optional[np.ndarray]:
        """Read the next frame, None if the device returned nothing."""
        if self._stopped:
            return None
        ok, frame = self._capture.read()
        if not ok or frame is None:
            return None
        return frame

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._capture.release()
        logger.debug(f"Camera {self._device_index} released")


class OpenCVMediaStream:
    """Stream holding a single OpenCV video track."""

    def __init__(self, track: OpenCVVideoTrack) -> None:
        self._tracks = [track]

    def get_tracks(self) -> List[OpenCVVideoTrack]:
        return list(self._tracks)

    def get_video_tracks(self) -> List[OpenCVVideoTrack]:
        return [track for track in self._tracks if track.kind == "video"]


class OpenCVMediaDevices:
    """
    Camera capability for hosts with OpenCV-visible devices.

    Facing modes are mapped onto device indexes: the environment
    (rear) camera must be configured explicitly, any other request
    opens the default device.

    Example:
        >>> devices = OpenCVMediaDevices(camera_index=0, environment_index=2)
        >>> stream = await devices.get_user_media(PREFERRED_CONSTRAINTS)
    """

    def __init__(self, camera_index: int = 0, environment_index: Optional[int] = None) -> None:
        self._camera_index = camera_index
        self._environment_index = environment_index

    def _resolve_index(self, constraints: MediaConstraints) -> int:
        if constraints.facing_mode == FacingMode.ENVIRONMENT:
            if self._environment_index is None:
                raise CameraUnavailableError("No rear-facing camera configured")
            return self._environment_index
        return self._camera_index

    def _open(self, index: int, constraints: MediaConstraints) -> OpenCVMediaStream:
        capture = cv2.VideoCapture(index)

        if not capture.isOpened():
            capture.release()
            raise CameraPermissionError(f"Could not open camera {index}")

        if constraints.width:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
        if constraints.height:
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)

        logger.info(
            f"📷 Camera {index} opened "
            f"({int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))}x"
            f"{int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))})"
        )
        return OpenCVMediaStream(OpenCVVideoTrack(capture, index))

    async def get_user_media(self, constraints: MediaConstraints) -> OpenCVMediaStream:
        """
        Open a camera matching the constraints.

        Device open blocks in the driver, so it runs on the default
        executor. The returned stream is owned by the caller.

        Raises:
            CameraUnavailableError: No device matches the facing mode
            CameraPermissionError: The device could not be opened
        """
        if constraints.audio:
            raise CameraUnavailableError("Audio capture is not supported")

        index = self._resolve_index(constraints)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._open, index, constraints)


class OpenCVVideoSurface:
    """
    Off-screen video surface for an OpenCV stream.

    current_frame() reads from the bound track on the calling thread.
    Called from a decode tick, that is the event loop thread: each read
    holds the loop for up to one device frame interval, and other
    requests and websocket traffic wait behind it. Only device open goes
    through the executor, so a frame read never overlaps stop().
    """

    def __init__(self) -> None:
        self.src_object: Optional[OpenCVMediaStream] = None
        self.muted = False
        self.plays_inline = False
        self._playing = False
        self._ready_state = MediaReadyState.HAVE_NOTHING
        self.video_width = 0
        self.video_height = 0

    @property
    def ready_state(self) -> MediaReadyState:
        return self._ready_state

    async def play(self) -> None:
        stream = self.src_object
        if stream is None or not stream.get_video_tracks():
            raise CameraUnavailableError("No video source bound")
        self._playing = True
        self._ready_state = MediaReadyState.HAVE_METADATA

    def pause(self) -> None:
        self._playing = False
        self._ready_state = MediaReadyState.HAVE_NOTHING
        self.video_width = 0
        self.video_height = 0

    def current_frame(self) -> Optional[np.ndarray]:
        """
        Return the current frame, or None while no data is buffered.

        Blocks until the device delivers a frame.

        Raises:
            CameraReadError: The bound track has ended
        """
        stream = self.src_object
        if not self._playing or stream is None:
            return None

        tracks = stream.get_video_tracks()
        if not tracks or tracks[0].ready_state != TrackReadyState.LIVE:
            raise CameraReadError()

        frame = tracks[0].read()
        if frame is None:
            self._ready_state = MediaReadyState.HAVE_METADATA
            return None

        self.video_height, self.video_width = frame.shape[:2]
        self._ready_state = MediaReadyState.HAVE_CURRENT_DATA
        return frame
