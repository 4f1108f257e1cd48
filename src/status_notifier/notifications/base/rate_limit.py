"""Sliding-window rate limiting for provider sends."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable


class SlidingWindowRateLimiter:
    """Admit at most ``max_events`` acquisitions within any ``period`` seconds.

    Only accepted acquisitions are recorded; rejected ones do not extend the
    window.

    Example:
        >>> limiter = SlidingWindowRateLimiter(max_events=2, period=60.0)
        >>> limiter.try_acquire(), limiter.try_acquire(), limiter.try_acquire()
        (True, True, False)
    """

    def __init__(
        self,
        max_events: int,
        period: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_events: Accepted acquisitions allowed per window
            period: Window length in seconds
            clock: Monotonic time source in seconds
        """
        if max_events < 1:
            msg = "max_events must be >= 1"
            raise ValueError(msg)
        if period <= 0:
            msg = "period must be > 0"
            raise ValueError(msg)
        self._max_events: int = max_events
        self._period: float = period
        self._clock: Callable[[], float] = clock
        self._accepted: deque[float] = deque()

    def _evict(self, now: float) -> None:
        cutoff = now - self._period
        while self._accepted and self._accepted[0] <= cutoff:
            _ = self._accepted.popleft()

    def try_acquire(self) -> bool:
        """Record a send if the window has room.

        Returns:
            True if the send is admitted
        """
        now = self._clock()
        self._evict(now)
        if len(self._accepted) >= self._max_events:
            return False
        self._accepted.append(now)
        return True
