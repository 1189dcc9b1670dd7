# services/rate_limiter.py
"""
Per-key admission control.

The route only depends on the RateLimiter protocol: `await limiter.limit(key)`
returning a result with a `success` flag. Deployments that sit behind an
external limiter inject their own implementation; otherwise the in-memory
sliding window below is used.
"""
import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class RateLimitResult(BaseModel):
    success: bool


class RateLimiter(Protocol):
    async def limit(self, key: str) -> RateLimitResult:
        ...


class SlidingWindowRateLimiter:
    """
    Allow at most `limit` calls per key within any `period_seconds` window.

    limit() never awaits, so each call runs atomically on the event loop.
    Keys whose window has emptied are dropped by a sweep that runs at most
    once per period, so idle clients do not accumulate.
    """

    def __init__(
        self,
        limit: int,
        period_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = limit
        self.period_seconds = period_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.period_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        dropped = 0
        for key in list(self._hits):
            hits = self._hits[key]
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
                dropped += 1
        if dropped:
            logger.debug(f"Dropped {dropped} idle rate limit keys")
        self._last_sweep = now

    async def limit(self, key: str) -> RateLimitResult:
        now = self._clock()
        if now - self._last_sweep >= self.period_seconds:
            self._sweep(now)

        hits = self._hits.get(key)
        if hits is not None:
            self._prune(hits, now)
        else:
            hits = self._hits[key] = deque()

        if len(hits) >= self.max_requests:
            return RateLimitResult(success=False)

        hits.append(now)
        return RateLimitResult(success=True)

    def tracked_keys(self) -> int:
        return len(self._hits)
