"""Studio runtime: drives the core with a single inbound queue.

Flow for every message:
  1. Take the next Action/Event off the queue.
  2. Run session.update() → new session + requests.
  3. Start each request on the boundary as its own task.
  4. When a task finishes, its events join the back of the queue.

Messages are applied strictly one at a time and in arrival order; the lock
makes concurrent callers (e.g. two HTTP requests importing at once) take
turns, so merges never interleave. send() returns once the queue is empty
and no boundary request is in flight.
"""

from __future__ import annotations

import asyncio
import logging

from buyan_studio.boundary import LocalBoundary
from buyan_studio.protocol import Msg, Request
from buyan_studio.session import Session, update

logger = logging.getLogger(__name__)


class Studio:
    def __init__(self, boundary: LocalBoundary, session: Session | None = None) -> None:
        self.boundary = boundary
        self.session = session or Session.initial()
        self._queue: asyncio.Queue[Msg] = asyncio.Queue()
        self._pending: set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        """Load durable state and seed defaults if needed."""
        for event in self.boundary.startup_events():
            self._queue.put_nowait(event)
        await self._drain()

    async def send(self, msg: Msg) -> None:
        self._queue.put_nowait(msg)
        await self._drain()

    def _step(self, msg: Msg) -> None:
        self.session, requests = update(self.session, msg)
        for request in requests:
            self._pending.add(asyncio.create_task(self._perform(request)))

    async def _perform(self, request: Request) -> list[Msg]:
        try:
            return await self.boundary.perform(request)
        except Exception:
            logger.exception("Boundary request %s failed", request.type)
            return []

    async def _drain(self) -> None:
        async with self._lock:
            while True:
                while not self._queue.empty():
                    self._step(self._queue.get_nowait())
                if not self._pending:
                    return
                done, self._pending = await asyncio.wait(
                    self._pending, return_when=asyncio.FIRST_COMPLETED
                )
                for task in done:
                    for event in task.result():
                        self._queue.put_nowait(event)


_studio: Studio | None = None


def init_studio(studio: Studio) -> Studio:
    global _studio
    _studio = studio
    return studio


def studio() -> Studio:
    assert _studio is not None, "Call init_studio() before using the studio"
    return _studio
