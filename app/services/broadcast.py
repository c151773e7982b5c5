"""Payload-free WebSocket fan-out for shared content lists.

After a testimonial, banner or sponsor write the server emits a named
event (e.g. ``banners_updated``) to every connected socket. The event
carries no data: receivers re-fetch the list. Each send runs as its own
task, so the emitting write returns without waiting on any client. There
is no retry and no ordering guarantee relative to later writes, so
clients must resynchronise on reconnect.
"""

import asyncio
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

TESTIMONIALS_UPDATED = "testimonials_updated"
BANNERS_UPDATED = "banners_updated"
SPONSORS_UPDATED = "sponsors_updated"

CONTENT_EVENTS = (TESTIMONIALS_UPDATED, BANNERS_UPDATED, SPONSORS_UPDATED)


class Socket(Protocol):
    async def send_json(self, data: Any, mode: str = "text") -> None: ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class Broadcaster:
    """Registry of connected sockets with fire-and-forget emit.

    A socket whose send fails or takes longer than ``send_timeout`` seconds
    is dropped from the registry.
    """

    def __init__(self, send_timeout: float = 5.0) -> None:
        self.send_timeout = send_timeout
        self._sockets: set[Socket] = set()
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task[bool]] = set()

    async def connect(self, socket: Socket) -> None:
        async with self._lock:
            self._sockets.add(socket)
        logger.info("Client connected (%d open)", len(self._sockets))

    async def disconnect(self, socket: Socket) -> None:
        async with self._lock:
            removed = socket in self._sockets
            self._sockets.discard(socket)
        if removed:
            logger.info("Client disconnected (%d open)", len(self._sockets))

    @property
    def connection_count(self) -> int:
        return len(self._sockets)

    @property
    def pending_sends(self) -> int:
        return len(self._pending)

    async def emit(self, event: str) -> int:
        """Schedule ``{"event": event}`` for every socket and return at once.

        Returns how many sends were scheduled. Never raises.
        """
        async with self._lock:
            sockets = list(self._sockets)

        for socket in sockets:
            task = asyncio.create_task(self._send(socket, event))
            self._pending.add(task)
            task.add_done_callback(self._on_send_done)

        logger.debug("Broadcast %s scheduled for %d sockets", event, len(sockets))
        return len(sockets)

    async def _send(self, socket: Socket, event: str) -> bool:
        try:
            await asyncio.wait_for(socket.send_json({"event": event}), self.send_timeout)
            return True
        except TimeoutError:
            logger.warning("Dropping socket after %ss send timeout for %s", self.send_timeout, event)
        except Exception as e:
            logger.warning("Dropping socket after failed send of %s: %s", event, e)
        await self.disconnect(socket)
        return False

    def _on_send_done(self, task: asyncio.Task[bool]) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Broadcast send task crashed", exc_info=task.exception())

    async def flush(self) -> int:
        """Wait for every in-flight send. Returns how many were delivered."""
        if not self._pending:
            return 0
        results = await asyncio.gather(*list(self._pending), return_exceptions=True)
        return sum(1 for r in results if r is True)

    async def close_all(self) -> None:
        for task in list(self._pending):
            task.cancel()
        async with self._lock:
            sockets = list(self._sockets)
            self._sockets.clear()
        for socket in sockets:
            try:
                await socket.close(code=1001, reason="Server shutdown")
            except Exception as e:
                logger.warning("Error closing socket: %s", e)
