"""
==============================================================================
Host Scheduler Module
==============================================================================

Frame ticks and one-shot timers for the scan session.

The session never sleeps or spawns threads itself; every deferred call
goes through a HostScheduler so the frame loop and the watchdog share
one event loop and can be cancelled by handle.

==============================================================================
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Protocol


Callback = Callable[[], None]


class HostScheduler(Protocol):
    def request_frame(self, callback: Callback) -> Any: ...

    def cancel_frame(self, handle: Any) -> None: ...

    def set_timeout(self, callback: Callback, delay: float) -> Any: ...

    def clear_timeout(self, handle: Any) -> None: ...


class AsyncioHostScheduler:
    """
    HostScheduler on an asyncio event loop.

    Frame ticks are paced at frame_rate; at most one tick per
    request_frame() call is ever delivered.

    Args:
        frame_rate: Ticks per second
        loop: Event loop to schedule on (running loop if None)
    """

    def __init__(
        self,
        frame_rate: float = 30.0,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ) -> None:
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        self._frame_interval = 1.0 / frame_rate
        self._loop = loop

    @property
    def frame_interval(self) -> float:
        return self._frame_interval

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request_frame(self, callback: Callback) -> asyncio.TimerHandle:
        return self._get_loop().call_later(self._frame_interval, callback)

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

    def set_timeout(self, callback: Callback, delay: float) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay, callback)

    def clear_timeout(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()
