"""Fragment cache port."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from tessera.domain.freshness.model.fragment import FragmentKey
from tessera.domain.shared.port import Port


class FragmentCache(Port, Protocol):
    """Stores rendered fragments by key.

    Keys embed the state of everything a fragment depends on, so entries are
    never invalidated explicitly: a changed input produces a new key and the
    old entry ages out.
    """

    async def fetch(self, key: FragmentKey, render: Callable[[], Awaitable[str]]) -> str:
        """Return the cached fragment for `key`, rendering and storing it on a miss."""
        ...
