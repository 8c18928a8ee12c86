"""
Process-wide rate limiter for Document Store calls.

Fixed window counter: at most max_per_window calls are admitted within
window_duration seconds of window_start. Further acquire() calls sleep
cooperatively until the window rolls over, then the counter resets.

The read-modify-write of the counter happens under an asyncio.Lock;
the sleep happens outside it so waiting callers never hold the lock.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DURATION = 1.5  # seconds
DEFAULT_MAX_PER_WINDOW = 10


@dataclass
class RateWindow:
    """Current window: when it opened and how many calls it admitted."""

    window_start: float
    count: int = 0


class RateLimiter:
    """Bounds outbound store calls to max_per_window per window_duration."""

    def __init__(
        self,
        window_duration: float = DEFAULT_WINDOW_DURATION,
        max_per_window: int = DEFAULT_MAX_PER_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_duration <= 0:
            raise ValueError("window_duration must be positive")
        if max_per_window < 1:
            raise ValueError("max_per_window must be at least 1")

        self.window_duration = window_duration
        self.max_per_window = max_per_window
        self._clock = clock
        self._lock = asyncio.Lock()
        self._window = RateWindow(window_start=clock())

    @property
    def window(self) -> RateWindow:
        """Snapshot of the current window."""
        return RateWindow(self._window.window_start, self._window.count)

    async def acquire(self) -> None:
        """Block until a call is permitted, then count it."""
        while True:
            async with self._lock:
                now = self._clock()
                if now - self._window.window_start >= self.window_duration:
                    self._window = RateWindow(window_start=now)

                if self._window.count < self.max_per_window:
                    self._window.count += 1
                    return

                wait = self._window.window_start + self.window_duration - now

            logger.debug(f"Rate limit reached, waiting {wait * 1000:.0f}ms for next window")
            await asyncio.sleep(wait)


# Shared instance for every store call site in the process
_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get the process-wide rate limiter (built from config on first use)."""
    global _limiter
    if _limiter is None:
        from contextual_rag.config import get_config

        config = get_config()
        _limiter = RateLimiter(
            window_duration=config.rate_window_seconds,
            max_per_window=config.rate_max_per_window,
        )
    return _limiter


def reset_rate_limiter() -> None:
    """Reset the shared limiter (useful for testing)."""
    global _limiter
    _limiter = None
