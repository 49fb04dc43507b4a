"""Quiescence timer for batched backend pushes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs an async callback once triggers stop arriving for ``delay`` seconds.

    Every trigger restarts the timer. Firing never interrupts a callback that
    is already running; a trigger during a run arms the timer for the next
    one.

    Args:
        delay: Quiescence window in seconds.
        callback: Coroutine function run when the window elapses.

    Example:
        >>> debouncer = Debouncer(1.0, push_dirty)
        >>> debouncer.trigger()
        >>> debouncer.trigger()  # restarts the window; push_dirty runs once
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def armed(self) -> bool:
        """A fire is scheduled."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        """A callback is in flight."""
        return any(not t.done() for t in self._tasks)

    def trigger(self) -> None:
        """Restart the quiescence window. Must be called from the event loop."""
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Disarm the timer without running the callback."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.get_running_loop().create_task(self._run())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self) -> None:
        try:
            await self._callback()
        except Exception:
            logger.exception("Debounced callback failed")

    async def wait_idle(self) -> None:
        """Wait for in-flight callbacks to finish."""
        while True:
            in_flight = [t for t in self._tasks if not t.done()]
            if not in_flight:
                return
            await asyncio.gather(*in_flight)

    async def flush(self) -> None:
        """Fire now if armed, then wait for every callback to finish."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()
        await self.wait_idle()
