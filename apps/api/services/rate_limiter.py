"""In-process fixed-window rate limiter."""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Dict, Tuple


class RateLimiter:
    """
    Allow at most ``limit`` hits per key in a fixed window of ``window_seconds``.

    The window for a key opens on its first hit and is replaced once it has
    elapsed. State lives only in this process and is lost on restart.
    """

    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.limit = max(int(limit), 0)
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = asyncio.Lock()

    async def consume(self, key: str) -> bool:
        """Record a hit for ``key``; return False when the quota is exhausted."""
        now = self._clock()
        async with self._lock:
            started_at, count = self._windows.get(key, (now, 0))
            if now - started_at >= self.window_seconds:
                started_at, count = now, 0
            if count >= self.limit:
                self._windows[key] = (started_at, count)
                return False
            self._windows[key] = (started_at, count + 1)
            self._prune(now)
            return True

    def _prune(self, now: float) -> None:
        expired = [key for key, (started_at, _) in self._windows.items() if now - started_at >= self.window_seconds]
        for key in expired:
            del self._windows[key]
