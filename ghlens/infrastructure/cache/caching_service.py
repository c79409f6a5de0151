"""Concrete implementation of the TTL Caching Service.

Keeps GitHub responses in memory with a fixed time-to-live. Expired
entries are treated as misses but stay in the map until overwritten,
cleared, or evicted by the capacity bound.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

# Domain Layer Imports
from ghlens.domain.interfaces.cache import CacheService
from ghlens.domain.models.common import CacheKey, CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60  # 5 minutes
DEFAULT_MAX_ENTRIES = 100

@dataclass
class CacheEntry:
    """Internal representation of a cache entry."""
    value: Any
    fetched_at: float # Unix timestamp of the fetch that produced the value

class CachingServiceImpl(CacheService):
    """In-memory cache keyed by composite keys such as 'profile:octocat'."""

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        """Initializes the caching service.

        Args:
            ttl: Seconds an entry stays valid after it was stored.
            max_entries: Capacity bound; None disables eviction.
            clock: Source of the current time in seconds.
        """
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        logger.info(f"CachingService initialized (ttl={ttl}s, max_entries={max_entries})")

    def _is_valid(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.fetched_at < self.ttl

    def _evict_oldest(self) -> None:
        """Drops entries with the oldest fetched_at until under the cap."""
        if self.max_entries is None:
            return
        while len(self._entries) > self.max_entries:
            oldest_key = min(self._entries, key=lambda k: self._entries[k].fetched_at)
            del self._entries[oldest_key]
            logger.debug(f"Cache EVICTED key: {oldest_key}")

    # --- CacheService Interface Implementation ---

    def get(self, key: CacheKey) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for key: {key}")
            return None
        if not self._is_valid(entry, self._clock()):
            logger.debug(f"Cache entry expired for key: {key}")
            return None
        logger.debug(f"Cache hit for key: {key}")
        return entry.value

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())
        self._evict_oldest()
        logger.debug(f"Stored item in cache: key={key}")

    def delete(self, key: CacheKey) -> None:
        if self._entries.pop(key, None) is not None:
            logger.debug(f"Deleted item from cache: key={key}")

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.info(f"Cleared cache ({count} entries).")

    def stats(self) -> CacheStats:
        now = self._clock()
        valid = sum(1 for entry in self._entries.values() if self._is_valid(entry, now))
        total = len(self._entries)
        return CacheStats(total=total, valid=valid, expired=total - valid)

    def __len__(self) -> int:
        return len(self._entries)
