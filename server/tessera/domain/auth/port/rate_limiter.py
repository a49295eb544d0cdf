"""Rate limiter port."""

from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Protocol

from tessera.domain.shared.port import Port


class RateLimiter(Port, Protocol):
    """Sliding-window request counter shared by all requests of the process."""

    async def hit(
        self,
        key: str,
        limit: int,
        window: timedelta,
        now: datetime | None = None,
    ) -> bool:
        """Record one request for `key` and report whether it is within the limit.

        Check and record are atomic: two concurrent callers can never both be
        admitted as the limit-th request. Rejected requests are not recorded.
        """
        ...

    async def hit_all(
        self,
        keys: Sequence[str],
        limit: int,
        window: timedelta,
        now: datetime | None = None,
    ) -> str | None:
        """Record one request against every key, or against none of them.

        Returns the first key that is over its limit, or None when all keys
        admitted the request and it was recorded for each.
        """
        ...
