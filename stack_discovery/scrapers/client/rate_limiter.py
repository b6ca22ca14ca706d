"""Sliding-window request limiter shared by every call to one source."""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Sliding-window limiter: at most ``max_requests`` in any trailing window.

    Callers over budget are delayed until the oldest request leaves the
    window, never rejected. Acquisition is serialized with an asyncio lock so
    tasks sharing one limiter stay within budget.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {max_requests}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self._timestamps: deque[float] = deque()
        self._lock = asyncio.Lock()

    def _prune(self, now: float) -> None:
        """Drop timestamps that fell out of the window."""
        cutoff = now - self.window_seconds
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()

    @property
    def in_window(self) -> int:
        """Requests recorded in the current window."""
        self._prune(self._clock())
        return len(self._timestamps)

    async def acquire(self) -> None:
        """Wait for a free slot, then record the request."""
        async with self._lock:
            now = self._clock()
            self._prune(now)

            while len(self._timestamps) >= self.max_requests:
                delay = self._timestamps[0] + self.window_seconds - now
                if delay > 0:
                    logger.info(f"Rate limit reached, waiting {delay:.2f}s")
                    await self._sleep(delay)
                now = self._clock()
                self._prune(now)

            self._timestamps.append(now)

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._timestamps.clear()
