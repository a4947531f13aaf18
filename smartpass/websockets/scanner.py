"""
==============================================================================
Scanner WebSocket Module
==============================================================================

Remote control for a kiosk camera scan session.

Protocol:
---------
Client -> server:
    {"type": "start"}   begin a scan attempt (ignored while one is running)
    {"type": "stop"}    cancel the current attempt
    {"type": "close"}   end the connection

Anything else, or text that is not JSON, is answered with an error
message (UNKNOWN_MESSAGE, INVALID_MESSAGE) and the connection stays open.

Server -> client:
    {"type": "state", "state": "preparing", "previous": "idle"}
    {"type": "error", "code": "CAMERA_DEAD_STREAM", "message": "..."}
    {"type": "scan", "payload": "s-42"}
    {"type": "seat", "seat": {...}}
    {"type": "lookup_error", "code": "SMARTPASS_API_ERROR", "message": "..."}

Each connection owns one session. Disconnecting closes it.

==============================================================================
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from smartpass.core.dependencies import get_scan_session_factory, get_seat_service
from smartpass.core.exceptions import AppException
from smartpass.scanner import ScanSessionFactory, ScanState
from smartpass.services import SeatService


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class ScannerWebSocketHandler:
    """
    Handler for kiosk scanning WebSocket connections.

    Session callbacks run synchronously on the event loop, so they only
    queue messages; a single pump task writes them to the socket in order.
    """

    def __init__(
        self,
        websocket: WebSocket,
        factory: ScanSessionFactory,
        seats: SeatService
    ):
        self._websocket = websocket
        self._seats = seats
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._lookups: set = set()
        self._session = factory.create(
            on_state_change=self._on_state_change,
            on_error=self._on_error
        )

    # =========================================================================
    # SESSION CALLBACKS
    # =========================================================================

    def _on_state_change(self, previous: ScanState, current: ScanState) -> None:
        self._outbox.put_nowait({
            "type": "state",
            "state": current.value,
            "previous": previous.value
        })

    def _on_error(self, code: str, message: str) -> None:
        logger.warning(f"⚠️ Scan error [{code}]: {message}")
        self._outbox.put_nowait({"type": "error", "code": code, "message": message})

    def _on_scan(self, payload: str) -> None:
        self._outbox.put_nowait({"type": "scan", "payload": payload})

        task = asyncio.ensure_future(self._lookup(payload))
        self._lookups.add(task)
        task.add_done_callback(self._lookups.discard)

    async def _lookup(self, payload: str) -> None:
        """Resolve a scanned payload to a seat record."""
        try:
            seat = await run_in_threadpool(self._seats.lookup, payload)
        except AppException as e:
            logger.warning(f"Seat lookup failed for {payload!r}: {e.message}")
            await self._outbox.put({
                "type": "lookup_error",
                "code": e.code,
                "message": e.message
            })
            return
        except Exception as e:
            logger.error(f"Seat lookup error for {payload!r}: {e}")
            await self._outbox.put({
                "type": "lookup_error",
                "code": "INTERNAL_ERROR",
                "message": "Seat lookup failed"
            })
            return

        logger.info(f"💺 Seat resolved: {seat.seat_number}")
        await self._outbox.put({"type": "seat", "seat": seat.model_dump(by_alias=True)})

    # =========================================================================
    # SOCKET
    # =========================================================================

    async def _pump(self) -> None:
        """Write queued messages until a None sentinel arrives."""
        while True:
            message = await self._outbox.get()
            if message is None:
                return
            try:
                await self._websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.debug(f"Dropping outbound message, socket gone: {e}")
                return

    async def handle_message(self, data: dict) -> bool:
        """
        Handle one client message.

        Returns:
            False when the client asked to close
        """
        kind = data.get("type") if isinstance(data, dict) else None

        if kind == "start":
            self._session.start(self._on_scan)
        elif kind == "stop":
            self._session.stop()
        elif kind == "close":
            logger.info("🛑 Client requested close")
            return False
        else:
            await self._outbox.put({
                "type": "error",
                "code": "UNKNOWN_MESSAGE",
                "message": f"Unknown message type: {kind!r}"
            })

        return True

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("📱 Scanner WebSocket connected")

        pump = asyncio.ensure_future(self._pump())
        self._outbox.put_nowait({"type": "state", "state": self._session.state.value})

        # Queued messages are flushed before closing unless the client is gone
        flush = False

        try:
            while True:
                text = await self._websocket.receive_text()

                try:
                    data = json.loads(text)
                except ValueError:
                    logger.warning("Ignoring malformed client message")
                    await self._outbox.put({
                        "type": "error",
                        "code": "INVALID_MESSAGE",
                        "message": "Message is not valid JSON"
                    })
                    continue

                if not await self.handle_message(data):
                    flush = True
                    break

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")

        except Exception as e:
            logger.error(f"WebSocket error: {e}")
            self._outbox.put_nowait({
                "type": "error",
                "code": "INTERNAL_ERROR",
                "message": str(e) or "Internal server error"
            })
            flush = True

        finally:
            self._session.close()

            for task in list(self._lookups):
                task.cancel()

            if flush:
                self._outbox.put_nowait(None)
                await pump
                await self._websocket.close()
            else:
                pump.cancel()

            logger.info("✅ Scanner WebSocket closed")


@router.websocket("/ws/scan")
async def websocket_scan(
    websocket: WebSocket,
    factory: ScanSessionFactory = Depends(get_scan_session_factory),
    seats: SeatService = Depends(get_seat_service)
):
    """Kiosk camera scanning via WebSocket."""
    handler = ScannerWebSocketHandler(websocket, factory, seats)
    await handler.run()
