# src/storage/lookup_cache.py

"""In-memory read-through cache for prior best price lookups."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from src.config.settings import Settings

logger = logging.getLogger("price_history.cache")

T = TypeVar("T")


@dataclass
class CacheEntry:
    """A cached lookup value and the time it was stored."""

    value: object
    timestamp: float


class LookupCache:
    """Key/value cache with a fixed time-to-live.

    ``None`` is a legitimate cached value ("no prior best price"), so
    hits are reported through :meth:`contains` / :meth:`get_or_compute`
    rather than by a ``None`` return.
    """

    def __init__(self, ttl: float | None = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._ttl: float = (
            ttl if ttl is not None else Settings.LOOKUP_CACHE_TTL
        )

    def contains(self, key: str) -> bool:
        """True if a fresh entry exists for ``key``."""
        self._evict_expired(time.time())
        return key in self._entries

    def get(self, key: str) -> object | None:
        """Return the cached value, or ``None`` on a miss."""
        self._evict_expired(time.time())
        entry = self._entries.get(key)
        return entry.value if entry else None

    def store(self, key: str, value: object) -> None:
        """Store a value under ``key``."""
        self._entries[key] = CacheEntry(value=value, timestamp=time.time())

    def get_or_compute(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached value, computing and storing it on a miss."""
        self._evict_expired(time.time())
        entry = self._entries.get(key)
        if entry is not None:
            logger.debug("Cache hit for %s", key)
            return entry.value  # type: ignore[return-value]

        value = loader()
        self.store(key, value)
        return value

    def clear(self) -> int:
        """Purge all cached entries.

        Returns the number of entries that were removed.
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info("Lookup cache purged (%d entries removed)", count)
        return count

    def _evict_expired(self, now: float) -> None:
        """Remove entries older than the TTL threshold."""
        before = len(self._entries)
        self._entries = {
            key: entry
            for key, entry in self._entries.items()
            if now - entry.timestamp < self._ttl
        }
        evicted = before - len(self._entries)
        if evicted:
            logger.debug("Evicted %d expired cache entries", evicted)
