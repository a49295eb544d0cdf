"""In-process sliding-window rate limiter."""

import asyncio
import logging
from collections import deque
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from tessera.domain.auth.port.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class InMemoryRateLimiter(RateLimiter):
    """Sliding-window log per key, held in this process.

    Check-and-record runs under one asyncio.Lock, so concurrent requests for
    the same key are admitted strictly one at a time. Counts are not shared
    between processes.
    """

    def __init__(self, max_keys: int = 10_000) -> None:
        self._hits: dict[str, deque[datetime]] = {}
        self._lock = asyncio.Lock()
        self._max_keys = max_keys

    async def hit(
        self,
        key: str,
        limit: int,
        window: timedelta,
        now: datetime | None = None,
    ) -> bool:
        return await self.hit_all([key], limit, window, now) is None

    async def hit_all(
        self,
        keys: Sequence[str],
        limit: int,
        window: timedelta,
        now: datetime | None = None,
    ) -> str | None:
        now = now or datetime.now(UTC)
        cutoff = now - window

        async with self._lock:
            new_keys = [key for key in keys if key not in self._hits]
            if new_keys and len(self._hits) + len(new_keys) > self._max_keys:
                self._drop_idle(cutoff)

            logs = [self._hits.setdefault(key, deque()) for key in keys]
            for key, hits in zip(keys, logs, strict=True):
                while hits and hits[0] <= cutoff:
                    hits.popleft()
                if len(hits) >= limit:
                    return key

            for hits in logs:
                hits.append(now)
            return None

    def __len__(self) -> int:
        return len(self._hits)

    def _drop_idle(self, cutoff: datetime) -> None:
        # Caller holds the lock
        idle = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits[key]
        logger.debug("Rate limiter dropped %d idle keys", len(idle))
