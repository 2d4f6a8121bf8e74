"""Process-wide caches shared by the routers that fill and invalidate them."""
from typing import Any, Dict, List

from gymcore.cache import TTLMemo
from gymcore.config import get_settings

settings = get_settings()

PLATFORM_STATS_KEY = "platform:stats"

stats_cache: TTLMemo[Dict[str, Any]] = TTLMemo("stats", ttl=settings.stats_cache_ttl)
marketplace_cache: TTLMemo[List[Dict[str, Any]]] = TTLMemo("marketplace", ttl=settings.marketplace_cache_ttl)


def invalidate_platform_stats() -> None:
    stats_cache.invalidate(PLATFORM_STATS_KEY)


def invalidate_gym_listing() -> None:
    """Drop everything derived from the gyms table."""
    marketplace_cache.clear()
    invalidate_platform_stats()


def clear_all() -> None:
    stats_cache.clear()
    marketplace_cache.clear()
