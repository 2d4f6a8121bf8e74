"""Keyed TTL memo for dashboard statistics and the public gym listing."""
from __future__ import annotations

import logging
from typing import Callable, Generic, Optional, TypeVar

from cachetools import TTLCache

T = TypeVar("T")

logger = logging.getLogger(__name__)


class TTLMemo(Generic[T]):
    def __init__(self, name: str, ttl: int, maxsize: int = 128) -> None:
        self.name = name
        self._cache: TTLCache[str, T] = TTLCache(maxsize=maxsize, ttl=ttl)

    def get(self, key: str) -> Optional[T]:
        return self._cache.get(key)

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """Return the cached value for ``key``, computing and storing it on a miss."""
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        logger.debug("%s cache miss for %s", self.name, key)
        value = compute()
        self._cache[key] = value
        return value

    def invalidate(self, *keys: str) -> None:
        for key in keys:
            self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
