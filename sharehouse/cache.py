"""TTL cache in front of the read-only shared space catalog."""
from __future__ import annotations

from typing import Callable, List

from cachetools import TTLCache

from .schemas import SharedSpaceRead

_LISTING_KEY = "spaces:all"


class SpaceListingCache:
    """Caches serialized spaces, never ORM rows bound to a request session."""

    def __init__(self, ttl: int, maxsize: int = 64) -> None:
        self._cache: TTLCache[str, List[SharedSpaceRead]] = TTLCache(maxsize=maxsize, ttl=ttl)

    def get_or_load(self, loader: Callable[[], List[SharedSpaceRead]]) -> List[SharedSpaceRead]:
        cached = self._cache.get(_LISTING_KEY)
        if cached is not None:
            return cached
        spaces = loader()
        self._cache[_LISTING_KEY] = spaces
        return spaces

    def invalidate(self) -> None:
        self._cache.clear()
