"""DI provider for the fragment cache."""

from dishka import provide

from tessera.config import Config
from tessera.domain.freshness.port.fragment_cache import FragmentCache
from tessera.infrastructure.cache.fragment_cache import InMemoryFragmentCache
from tessera.util.di.base import Provider
from tessera.util.di.scope import Scope


class CacheProvider(Provider):
    @provide(scope=Scope.APP)
    def get_fragment_cache(self, config: Config) -> FragmentCache:
        return InMemoryFragmentCache(max_entries=config.cache.fragment_max_entries)
