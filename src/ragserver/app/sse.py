from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

DisconnectProbe = Callable[[], Awaitable[bool]]


def format_event(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


def format_comment(text: str) -> str:
    return f": {text}\n\n"


class SSESession:
    """One open event stream.

    Frames are queued by ``push``/``comment`` and drained by ``stream``. A
    keep-alive task queues a ping comment every ``keepalive_interval`` seconds
    once ``start`` is called. ``close`` is terminal: the keep-alive task is
    cancelled and later pushes are dropped.
    """

    def __init__(
        self,
        keepalive_interval: float = 30.0,
        *,
        is_disconnected: DisconnectProbe | None = None,
    ):
        self.id = uuid.uuid4().hex
        self._keepalive_interval = keepalive_interval
        self._is_disconnected = is_disconnected
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._keepalive_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, event: str, data: Any) -> bool:
        if self._closed:
            return False
        logger.debug("Sending %s event on session %s", event, self.id)
        self._queue.put_nowait(format_event(event, data))
        return True

    def comment(self, text: str = "ping") -> bool:
        if self._closed:
            return False
        self._queue.put_nowait(format_comment(text))
        return True

    def start(self) -> None:
        if self._closed or self._keepalive_task is not None:
            return
        self._keepalive_task = asyncio.get_running_loop().create_task(
            self._keepalive()
        )

    async def _keepalive(self) -> None:
        while not self._closed:
            await asyncio.sleep(self._keepalive_interval)
            self.comment("ping")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._keepalive_task is not None:
            self._keepalive_task.cancel()
            self._keepalive_task = None
        # wake a reader blocked on an empty queue
        self._queue.put_nowait(None)
        logger.info("Client disconnected from SSE stream (session %s)", self.id)

    async def stream(self) -> AsyncIterator[str]:
        self.start()
        try:
            while not self._closed:
                frame = await self._queue.get()
                if frame is None:
                    break
                if self._is_disconnected is not None and await self._is_disconnected():
                    break
                yield frame
        finally:
            self.close()
