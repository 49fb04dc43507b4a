"""Rate limiting for drag-time recomputation."""

from __future__ import annotations

import time
from collections.abc import Callable


class DragThrottle:
    """Lets at most one provisional update through per interval.

    Suppressed updates are not queued; the caller keeps the latest target and
    applies it on release.

    Args:
        interval_ms: Minimum time between accepted updates.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self, interval_ms: float = 16.0, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.interval_ms = interval_ms
        self._clock = clock
        self._last: float | None = None

    def ready(self) -> bool:
        """Whether an update may run now. Accepting an update restarts the interval."""
        now = self._clock()
        if self._last is not None and (now - self._last) * 1000.0 < self.interval_ms:
            return False
        self._last = now
        return True

    def reset(self) -> None:
        self._last = None
