from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol, Set

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None]]


class Timer(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Clock(Protocol):
    def call_later(self, delay_s: float, fn: Callback) -> Timer: ...

    def call_every(self, interval_s: float, fn: Callback) -> Timer: ...


class _TaskTimer:
    def __init__(self, task: asyncio.Task) -> None:
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    def cancel(self) -> None:
        self._task.cancel()


class AsyncioClock:
    """Timers as event-loop tasks. Must be used from inside a running loop."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def _spawn(self, coro: Awaitable[None]) -> _TaskTimer:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return _TaskTimer(task)

    def call_later(self, delay_s: float, fn: Callback) -> _TaskTimer:
        async def run() -> None:
            await asyncio.sleep(delay_s)
            try:
                await fn()
            except Exception:
                logger.exception("clock_oneshot_callback_failed")

        return self._spawn(run())

    def call_every(self, interval_s: float, fn: Callback) -> _TaskTimer:
        async def run() -> None:
            while True:
                await asyncio.sleep(interval_s)
                try:
                    await fn()
                except Exception:
                    logger.exception("clock_periodic_callback_failed")

        return self._spawn(run())

    async def close(self) -> None:
        tasks = list(self._tasks)
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
