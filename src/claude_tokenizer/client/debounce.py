"""Debounced scheduling of an async callback."""
from __future__ import annotations
import asyncio
from typing import Any, Awaitable, Callable


class Debouncer:
    """Run `callback(*args)` once `delay` seconds pass without another call.

    Every call or cancel bumps a version; a timer only fires if its version is
    still current, so superseded timers never run. Must be used from inside a
    running event loop.
    """

    def __init__(self, callback: Callable[..., Awaitable[Any]], delay: float) -> None:
        self._callback = callback
        self._delay = delay
        self._version = 0
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def version(self) -> int:
        return self._version

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        version = self._version
        self._handle = loop.call_later(self._delay, self._fire, version, args)

    def cancel(self) -> None:
        """Drop the scheduled call, if any. A callback already running is left alone."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._version += 1

    def _fire(self, version: int, args: tuple[Any, ...]) -> None:
        if version != self._version:
            return
        self._handle = None
        task = asyncio.get_running_loop().create_task(self._callback(*args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def flush(self) -> None:
        """Wait for the scheduled call to fire and every started callback to finish."""
        while self._handle is not None:
            await asyncio.sleep(self._delay)
        if self._tasks:
            await asyncio.gather(*self._tasks)

    async def aclose(self) -> None:
        """Drop the scheduled call and cancel every callback still running."""
        self.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
