from __future__ import annotations

import asyncio

import structlog

logger = structlog.get_logger(__name__)


class WatchHandle:
    """Stoppable handle over a background listener task.

    :meth:`stop` cancels the task and waits for it to unwind. It is safe to
    call more than once, and safe to call after the task already finished.
    """

    def __init__(self, task: asyncio.Task[None], name: str) -> None:
        self._task = task
        self._name = name
        self._stopped = False

    def __repr__(self) -> str:
        return f"WatchHandle(name={self._name!r}, stopped={self._stopped}, done={self.done})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def done(self) -> bool:
        return self._task.done()

    async def wait(self) -> None:
        """Wait for the listener to finish on its own."""
        await asyncio.wait([self._task])

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        if not self._task.done():
            self._task.cancel()
        # asyncio.wait never raises the task's own CancelledError, so only a
        # cancellation of the caller propagates from here.
        await asyncio.wait([self._task])
        logger.debug("watch_stopped", watch=self._name)
