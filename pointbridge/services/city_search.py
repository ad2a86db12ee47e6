"""
City search with an in-process TTL cache and graceful fallback.

Cache entries move from absent to populated on the first successful fetch,
become stale once the TTL elapses, and are either replaced by the next
successful fetch or served stale when the source fails. Lookups are not
atomic: concurrent identical misses may both fetch and both populate.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from pointbridge.clients.city_directory import CitySearchError, CitySource
from pointbridge.schemas.cities import City

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "cities"
MIN_QUERY_LENGTH = 2


@dataclass(slots=True)
class CacheEntry:
    data: List[City]
    timestamp: float


class CitySearchService:
    def __init__(
        self,
        source: CitySource,
        *,
        ttl_seconds: float = 300,
        max_results: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._ttl = ttl_seconds
        self._max_results = max_results
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}

    @staticmethod
    def cache_key(query: str) -> str:
        return f"{CACHE_NAMESPACE}:{query.lower()}"

    async def search(self, query: str, *, limit: int | None = None) -> List[City]:
        """Return up to ``limit`` cities matching ``query``; never raises."""
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return []

        count = self._max_results if limit is None else max(0, min(limit, self._max_results))
        key = self.cache_key(query)
        entry = self._cache.get(key)
        if entry is not None and self._clock() - entry.timestamp < self._ttl:
            logger.debug("City cache hit for %r", query)
            return entry.data[:count]

        try:
            cities = await self._source.fetch(query, limit=self._max_results)
        except CitySearchError:
            if entry is not None:
                logger.warning("City search failed for %r; serving stale cache", query, exc_info=True)
                return entry.data[:count]
            logger.warning("City search failed for %r; no cached results", query, exc_info=True)
            return []

        self._cache[key] = CacheEntry(data=cities, timestamp=self._clock())
        logger.debug("City search for %r returned %d rows", query, len(cities))
        return cities[:count]

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("City cache cleared")

    def cache_stats(self) -> Dict[str, Any]:
        now = self._clock()
        return {
            "size": len(self._cache),
            "ttl_seconds": self._ttl,
            "entries": [
                {"key": key, "age_seconds": now - entry.timestamp}
                for key, entry in self._cache.items()
            ],
        }


__all__ = ["CacheEntry", "CitySearchService", "MIN_QUERY_LENGTH"]
