"""
==============================================================================
Scan Session Tests
==============================================================================

Lifecycle tests for ScanSession driven by a manual scheduler and fake
camera, surface and decoder.

==============================================================================
"""

import asyncio

import numpy as np
import pytest

from smartpass.scanner import ScanSession, ScanState
from smartpass.scanner.models import (
    CAMERA_ACCESS_FAILED,
    CAMERA_DEAD_STREAM,
    CAMERA_FRAME_ERROR,
    CAMERA_UNSUPPORTED,
    DEAD_STREAM_MESSAGE,
    FALLBACK_CONSTRAINTS,
    PREFERRED_CONSTRAINTS,
    UNSUPPORTED_MESSAGE,
    TrackReadyState,
)

from fakes import (
    FakeMediaDevices,
    FakeSurface,
    ManualScheduler,
    Recorder,
    ScriptedDecoder,
)


def make_session(devices=None, decoder=None, surface=None, no_camera=False):
    recorder = Recorder()
    scheduler = ManualScheduler()
    surface = surface or FakeSurface()
    session = ScanSession(
        media_devices=None if no_camera else (devices or FakeMediaDevices()),
        surface=surface,
        decoder=decoder or ScriptedDecoder(),
        scheduler=scheduler,
        on_state_change=recorder.on_state_change,
        on_error=recorder.on_error,
    )
    return session, scheduler, surface, recorder


# ============================================================================
# ACQUISITION
# ============================================================================

class TestAcquisition:
    """Tests for starting a scan."""

    @pytest.mark.asyncio
    async def test_start_binds_stream(self):
        devices = FakeMediaDevices()
        session, scheduler, surface, recorder = make_session(devices=devices)

        task = session.start(recorder.on_success)
        assert session.state == ScanState.PREPARING
        assert session.is_preparing is True

        await task

        stream = devices.streams[0]
        assert devices.requests == [PREFERRED_CONSTRAINTS]
        assert session.stream is stream
        assert surface.src_object is stream
        assert surface.muted is True
        assert surface.plays_inline is True
        assert surface.play_calls == 1
        assert session.is_scanning is True
        assert session.is_camera_ready is True
        assert session.has_pending_frame is True
        assert session.has_pending_watchdog is True
        assert scheduler.delays == [1.0]
        assert session.state == ScanState.PREPARING

    @pytest.mark.asyncio
    async def test_second_start_is_ignored(self):
        devices = FakeMediaDevices()
        session, _, _, recorder = make_session(devices=devices)

        task = session.start(recorder.on_success)
        assert session.start(recorder.on_success) is None
        await task
        assert session.start(recorder.on_success) is None

        assert len(devices.requests) == 1
        assert len(devices.streams) == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_default_camera(self):
        devices = FakeMediaDevices(failing=[PREFERRED_CONSTRAINTS])
        session, _, surface, recorder = make_session(devices=devices)

        await session.start(recorder.on_success)

        assert devices.requests == [PREFERRED_CONSTRAINTS, FALLBACK_CONSTRAINTS]
        assert surface.src_object is devices.streams[0]
        assert recorder.errors == []
        assert session.error is None

    @pytest.mark.asyncio
    async def test_both_cameras_fail(self):
        devices = FakeMediaDevices(failing=[PREFERRED_CONSTRAINTS, FALLBACK_CONSTRAINTS])
        session, scheduler, surface, recorder = make_session(devices=devices)

        await session.start(recorder.on_success)

        assert recorder.errors == [(CAMERA_ACCESS_FAILED, "Permission denied")]
        assert session.error == "Permission denied"
        assert session.error_code == CAMERA_ACCESS_FAILED
        assert session.state == ScanState.IDLE
        assert session.is_scanning is False
        assert session.is_preparing is False
        assert scheduler.frames == {}
        assert scheduler.timeouts == {}
        assert surface.src_object is None

    def test_unsupported_device(self):
        session, _, _, recorder = make_session(no_camera=True)

        assert session.start(recorder.on_success) is None

        assert recorder.errors == [(CAMERA_UNSUPPORTED, UNSUPPORTED_MESSAGE)]
        assert session.error == UNSUPPORTED_MESSAGE
        assert session.state == ScanState.IDLE
        assert recorder.transitions == []

    @pytest.mark.asyncio
    async def test_error_cleared_on_next_start(self):
        devices = FakeMediaDevices(failing=[PREFERRED_CONSTRAINTS, FALLBACK_CONSTRAINTS])
        session, _, _, recorder = make_session(devices=devices)
        await session.start(recorder.on_success)
        assert session.error is not None

        devices.failing = []
        task = session.start(recorder.on_success)
        assert session.error is None
        await task
        assert session.stream is not None


# ============================================================================
# WATCHDOG
# ============================================================================

class TestWatchdog:
    """Tests for the live-track check."""

    @pytest.mark.asyncio
    async def test_live_track_activates(self):
        session, scheduler, _, recorder = make_session()
        await session.start(recorder.on_success)

        scheduler.fire_timeouts()

        assert session.state == ScanState.ACTIVE
        assert session.is_preparing is False
        assert recorder.transitions == [
            (ScanState.IDLE, ScanState.PREPARING),
            (ScanState.PREPARING, ScanState.ACTIVE),
        ]

    @pytest.mark.asyncio
    async def test_dead_stream_stops(self):
        devices = FakeMediaDevices()
        session, scheduler, surface, recorder = make_session(devices=devices)
        await session.start(recorder.on_success)

        devices.streams[0].tracks[0].ready_state = TrackReadyState.ENDED
        scheduler.fire_timeouts()

        assert recorder.errors == [(CAMERA_DEAD_STREAM, DEAD_STREAM_MESSAGE)]
        assert session.state == ScanState.IDLE
        assert scheduler.frames == {}
        assert surface.src_object is None

    @pytest.mark.asyncio
    async def test_stream_without_video_track_stops(self):
        devices = FakeMediaDevices()
        session, scheduler, _, recorder = make_session(devices=devices)
        await session.start(recorder.on_success)

        devices.streams[0].tracks[0].kind = "audio"
        scheduler.fire_timeouts()

        assert session.error_code == CAMERA_DEAD_STREAM
        assert session.state == ScanState.IDLE


# ============================================================================
# FRAME LOOP
# ============================================================================

class TestFrameLoop:
    """Tests for decode ticks."""

    @pytest.mark.asyncio
    async def test_success_on_third_tick(self):
        devices = FakeMediaDevices()
        decoder = ScriptedDecoder([None, None, "S-42"])
        session, scheduler, surface, recorder = make_session(devices=devices, decoder=decoder)
        await session.start(recorder.on_success)
        scheduler.fire_timeouts()

        for _ in range(3):
            scheduler.run_frames()

        assert recorder.payloads == ["S-42"]
        assert session.decode_attempts == 3
        assert decoder.calls[0][:2] == (6, 4)
        assert session.state == ScanState.IDLE
        assert devices.streams[0].tracks[0].stop_calls == 1
        assert surface.src_object is None
        assert session.has_pending_frame is False

        # No further ticks once a payload has been delivered
        scheduler.run_frames()
        assert recorder.payloads == ["S-42"]

    @pytest.mark.asyncio
    async def test_rear_camera_denied_then_sixth_tick_decodes(self):
        devices = FakeMediaDevices(failing=[PREFERRED_CONSTRAINTS])
        decoder = ScriptedDecoder([None] * 5 + ["S-42"])
        session, scheduler, _, recorder = make_session(devices=devices, decoder=decoder)

        await session.start(recorder.on_success)
        scheduler.fire_timeouts()
        for _ in range(6):
            scheduler.run_frames()

        assert devices.requests == [PREFERRED_CONSTRAINTS, FALLBACK_CONSTRAINTS]
        assert recorder.payloads == ["S-42"]
        assert session.state == ScanState.IDLE
        assert all(t.ready_state == TrackReadyState.ENDED for t in devices.streams[0].tracks)
        assert scheduler.frames == {}
        assert scheduler.timeouts == {}
        assert recorder.errors == []

    @pytest.mark.asyncio
    async def test_success_before_watchdog(self):
        session, scheduler, _, recorder = make_session(decoder=ScriptedDecoder(["7"]))
        await session.start(recorder.on_success)

        scheduler.run_frames()

        assert recorder.payloads == ["7"]
        assert scheduler.timeouts == {}
        assert session.state == ScanState.IDLE

    @pytest.mark.asyncio
    async def test_empty_payload_keeps_scanning(self):
        decoder = ScriptedDecoder([""])
        session, scheduler, _, recorder = make_session(decoder=decoder)
        await session.start(recorder.on_success)

        scheduler.run_frames()

        assert recorder.payloads == []
        assert session.has_pending_frame is True

    @pytest.mark.asyncio
    async def test_no_frame_yet_reschedules(self):
        decoder = ScriptedDecoder()
        session, scheduler, surface, recorder = make_session(decoder=decoder)
        surface.frame = None
        await session.start(recorder.on_success)

        scheduler.run_frames()

        assert decoder.calls == []
        assert session.has_pending_frame is True

    @pytest.mark.asyncio
    async def test_frame_read_error_stops(self):
        session, scheduler, surface, recorder = make_session()
        await session.start(recorder.on_success)

        surface.read_error = "Camera frame could not be read"
        scheduler.run_frames()

        assert recorder.errors == [(CAMERA_FRAME_ERROR, "Camera frame could not be read")]
        assert session.state == ScanState.IDLE

    @pytest.mark.asyncio
    async def test_unsupported_frame_format_stops(self):
        devices = FakeMediaDevices()
        decoder = ScriptedDecoder()
        session, scheduler, surface, recorder = make_session(devices=devices, decoder=decoder)
        await session.start(recorder.on_success)

        surface.frame = np.zeros((4, 6, 2), dtype=np.uint8)
        scheduler.run_frames()

        assert [code for code, _ in recorder.errors] == [CAMERA_FRAME_ERROR]
        assert decoder.calls == []
        assert session.state == ScanState.IDLE
        assert session.has_pending_frame is False
        assert devices.streams[0].tracks[0].stop_calls == 1

    @pytest.mark.asyncio
    async def test_failing_callback_still_stops(self):
        devices = FakeMediaDevices()
        session, scheduler, _, _ = make_session(devices=devices, decoder=ScriptedDecoder(["S-1"]))

        def explode(payload):
            raise ValueError(payload)

        await session.start(explode)

        with pytest.raises(ValueError):
            scheduler.run_frames()

        assert session.state == ScanState.IDLE
        assert devices.streams[0].tracks[0].stop_calls == 1


# ============================================================================
# TEARDOWN
# ============================================================================

class TestTeardown:
    """Tests for stop() and close()."""

    def test_stop_when_idle_is_noop(self):
        session, _, _, recorder = make_session()

        session.stop()
        session.stop()

        assert session.state == ScanState.IDLE
        assert recorder.transitions == []

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        devices = FakeMediaDevices()
        session, scheduler, surface, recorder = make_session(devices=devices)
        await session.start(recorder.on_success)

        session.stop()
        session.stop()

        assert recorder.transitions == [
            (ScanState.IDLE, ScanState.PREPARING),
            (ScanState.PREPARING, ScanState.STOPPED),
            (ScanState.STOPPED, ScanState.IDLE),
        ]
        assert devices.streams[0].tracks[0].ready_state == TrackReadyState.ENDED
        assert scheduler.frames == {}
        assert scheduler.timeouts == {}
        assert surface.src_object is None

    @pytest.mark.asyncio
    async def test_stop_before_first_tick(self):
        decoder = ScriptedDecoder(["S-42"])
        session, scheduler, _, recorder = make_session(decoder=decoder)
        await session.start(recorder.on_success)

        session.stop()
        scheduler.run_frames()
        scheduler.fire_timeouts()

        assert decoder.calls == []
        assert recorder.payloads == []

    @pytest.mark.asyncio
    async def test_close_during_pending_acquisition(self):
        gate = asyncio.Event()
        devices = FakeMediaDevices(gate=gate)
        session, scheduler, surface, recorder = make_session(devices=devices)

        task = session.start(recorder.on_success)
        await asyncio.sleep(0)
        assert devices.requests == [PREFERRED_CONSTRAINTS]

        session.close()
        transitions = list(recorder.transitions)

        gate.set()
        await task

        stream = devices.streams[0]
        assert stream.tracks[0].stop_calls == 1
        assert session.stream is None
        assert surface.src_object is None
        assert scheduler.frames == {}
        assert scheduler.timeouts == {}
        assert recorder.transitions == transitions
        assert recorder.errors == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("teardown", ["stop", "close"])
    async def test_cancelled_while_playback_starts(self, teardown):
        devices = FakeMediaDevices()
        surface = FakeSurface()
        surface.play_gate = asyncio.Event()
        session, scheduler, _, recorder = make_session(devices=devices, surface=surface)

        task = session.start(recorder.on_success)
        await asyncio.sleep(0)
        assert surface.play_calls == 1
        assert surface.src_object is devices.streams[0]

        getattr(session, teardown)()

        surface.play_gate.set()
        await task

        assert all(t.ready_state == TrackReadyState.ENDED for t in devices.streams[0].tracks)
        assert session.stream is None
        assert surface.src_object is None
        assert session.is_scanning is False
        assert scheduler.frames == {}
        assert scheduler.timeouts == {}
        assert session.state == ScanState.IDLE
        assert all(current != ScanState.ACTIVE for _, current in recorder.transitions)
        assert recorder.errors == []

    @pytest.mark.asyncio
    async def test_stop_then_restart_during_acquisition(self):
        gate = asyncio.Event()
        devices = FakeMediaDevices(gate=gate)
        session, _, surface, recorder = make_session(devices=devices)

        first = session.start(recorder.on_success)
        await asyncio.sleep(0)
        session.stop()
        second = session.start(recorder.on_success)

        gate.set()
        await asyncio.gather(first, second)

        current = surface.src_object
        stale = [s for s in devices.streams if s is not current]

        assert len(devices.streams) == 2
        assert len(stale) == 1
        assert stale[0].tracks[0].stop_calls == 1
        assert current.tracks[0].stop_calls == 0
        assert session.stream is current

    @pytest.mark.asyncio
    async def test_start_after_close_is_ignored(self):
        devices = FakeMediaDevices()
        session, _, _, recorder = make_session(devices=devices)

        session.close()

        assert session.start(recorder.on_success) is None
        assert session.is_closed is True
        assert devices.requests == []
