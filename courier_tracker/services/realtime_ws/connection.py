# courier_tracker/services/realtime_ws/connection.py
"""
One WebSocket connection with its own outbound queue.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Coroutine
from uuid import uuid4

from fastapi import WebSocket

from courier_tracker.common.logger import get_logger

logger = get_logger("realtime_ws")


class Connection:
    """
    Wraps a WebSocket for the subscription registry.

    deliver() only enqueues; a sender task writes to the socket. A slow
    client therefore never blocks the publisher, it just loses messages once
    its queue is full.
    """

    def __init__(self, websocket: WebSocket, queue_size: int = 100) -> None:
        self.id = uuid4().hex
        self.websocket = websocket
        self.connected_at = datetime.now(timezone.utc)
        self.messages_sent = 0
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self._closed = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Messages waiting to be written."""
        return self._queue.qsize()

    def deliver(self, message: dict[str, Any]) -> bool:
        """Queues a message. False if the connection is closed or lagging."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            return False
        return True

    async def run_sender(self) -> None:
        """Writes queued messages to the socket until it fails or is cancelled."""
        while not self._closed:
            message = await self._queue.get()
            try:
                await self.websocket.send_json(message)
            except Exception as e:
                # socket already gone; the receive loop will handle the disconnect
                logger.debug("Send to connection %s failed: %s", self.id, e)
                self._closed = True
                return
            self.messages_sent += 1

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Runs a handler for this connection in the background."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def in_flight(self) -> int:
        """Handlers still running."""
        return len(self._tasks)

    async def drain(self, timeout: float) -> int:
        """
        Waits for in-flight handlers, then cancels those still running.

        Returns:
            Number of handlers cancelled
        """
        if not self._tasks:
            return 0

        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning("Cancelled %s unfinished handlers of connection %s", len(pending), self.id)
        return len(pending)

    def close(self) -> None:
        """Stops accepting messages. In-flight handlers keep running."""
        self._closed = True

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, closed={self._closed})"
