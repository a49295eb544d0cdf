"""In-memory LRU fragment cache."""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable

from tessera.domain.freshness.model.fragment import FragmentKey
from tessera.domain.freshness.port.fragment_cache import FragmentCache

logger = logging.getLogger(__name__)


class InMemoryFragmentCache(FragmentCache):
    """Bounded LRU of rendered fragments, shared by all requests of the process."""

    def __init__(self, max_entries: int) -> None:
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._max_entries = max_entries
        self._lock = asyncio.Lock()
        self.hits = 0
        self.misses = 0

    async def fetch(self, key: FragmentKey, render: Callable[[], Awaitable[str]]) -> str:
        async with self._lock:
            cached = self._entries.get(key.value)
            if cached is not None:
                self._entries.move_to_end(key.value)
                self.hits += 1
                return cached

        # Rendered outside the lock; two concurrent misses both render and
        # store the same value.
        rendered = await render()

        async with self._lock:
            self.misses += 1
            self._entries[key.value] = rendered
            self._entries.move_to_end(key.value)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Fragment evicted: %s", evicted)
        return rendered

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: FragmentKey) -> bool:
        return key.value in self._entries
