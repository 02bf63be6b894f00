from __future__ import annotations

import asyncio
import concurrent.futures
import time
from typing import Any, AsyncIterator, Awaitable, Callable, Coroutine, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine synchronously.

    Creates a new event loop if none is running. If a loop is already running
    (a pipeline runner that is itself async), the coroutine runs on a fresh
    loop in a worker thread so this thread can block on its result.

    Args:
        coro: The coroutine to run.

    Returns:
        The value returned by *coro*.

    Raises:
        Any exception raised by *coro*.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(asyncio.run, coro)
        return future.result()


def remaining_until(deadline: float | None) -> float | None:
    """Seconds left before the monotonic *deadline*, never negative.

    ``None`` means no deadline and is passed through.
    """
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())


async def poll_every(
    fetch: Callable[[], Awaitable[T]], interval: float
) -> AsyncIterator[T]:
    """Yield ``await fetch()`` immediately and then every *interval* seconds.

    Turns a one-shot remote read into an event source for
    :func:`consume_until`.
    """
    while True:
        yield await fetch()
        await asyncio.sleep(interval)


async def consume_until(
    source: AsyncIterator[T],
    deadline: float | None,
    on_item: Callable[[T], bool],
) -> T | None:
    """Race an event source against an absolute deadline.

    Calls *on_item* for every item from *source* and returns the first item
    for which it returns ``True``. Returns ``None`` when the source is
    exhausted or *deadline* (``time.monotonic()`` based) passes first.

    The source is closed on every exit path, including cancellation of the
    calling task, which is always re-raised.
    """
    try:
        async with asyncio.timeout(remaining_until(deadline)):
            async for item in source:
                if on_item(item):
                    return item
    except TimeoutError:
        return None
    finally:
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()
    return None


class OneShotGate:
    """A gate that opens exactly once.

    :meth:`release` may be called any number of times from event callbacks;
    only the first call opens the gate and returns ``True``.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.release_attempts = 0

    def __repr__(self) -> str:
        return f"OneShotGate(released={self.released}, attempts={self.release_attempts})"

    @property
    def released(self) -> bool:
        return self._event.is_set()

    def release(self) -> bool:
        self.release_attempts += 1
        if self._event.is_set():
            return False
        self._event.set()
        return True

    async def wait_until(self, deadline: float) -> bool:
        """Block until released or *deadline* passes; ``True`` if released."""
        try:
            async with asyncio.timeout(remaining_until(deadline)):
                await self._event.wait()
        except TimeoutError:
            return self.released
        return True
