"""Cache repository - in-memory TTL store for query results."""

import time
from collections.abc import Callable
from typing import Any

from loguru import logger

from carbot.errors import validate_key, validate_seconds
from carbot.models.cache import MISS, CacheEntry
from settings import CACHE_SWEEP_THRESHOLD, CACHE_TTL


class CacheStore:
    """Key-value store with lazy, read-time expiry.

    Entries expire when their age reaches their TTL. Expired entries are
    dropped on read; once the store holds more than `sweep_threshold`
    entries, every `set` also sweeps out entries older than the default TTL.
    The threshold is a soft bound: fresh entries are never evicted to make
    room.
    """

    def __init__(
        self,
        default_ttl: float = CACHE_TTL,
        sweep_threshold: int = CACHE_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ):
        validate_seconds(default_ttl, "default_ttl")
        self.default_ttl = default_ttl
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "evictions": 0,
        }
        logger.debug("CacheStore: default_ttl={}s, sweep_threshold={}", default_ttl, sweep_threshold)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_fresh(self._clock())

    def get(self, key: str) -> Any:
        """Return cached value, or MISS if absent or expired."""
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(self._clock()):
            self._stats["hits"] += 1
            logger.debug("Cache hit: {}", key)
            return entry.value

        if entry is not None:
            del self._entries[key]
            self._stats["evictions"] += 1
            logger.debug("Cache expired: {}", key)
        self._stats["misses"] += 1
        return MISS

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Insert or overwrite a value, stamped with the current time."""
        validate_key(key)
        validate_seconds(ttl, "ttl")
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            inserted_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )
        self._stats["sets"] += 1

        if len(self._entries) > self.sweep_threshold:
            self.sweep()

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Remove all entries."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cache cleared: {} entries", count)
        return count

    def sweep(self) -> int:
        """Drop entries older than the default TTL or past their own TTL."""
        now = self._clock()
        stale = [
            key
            for key, entry in self._entries.items()
            if entry.age(now) > self.default_ttl or not entry.is_fresh(now)
        ]
        for key in stale:
            del self._entries[key]

        self._stats["evictions"] += len(stale)
        if stale:
            logger.info("Cache sweep: evicted {}, kept {}", len(stale), len(self._entries))
        return len(stale)

    @property
    def stats(self) -> dict[str, Any]:
        """Size, TTL and hit/miss counters."""
        lookups = self._stats["hits"] + self._stats["misses"]
        return {
            "size": len(self._entries),
            "default_ttl": self.default_ttl,
            **self._stats,
            "hit_rate": self._stats["hits"] / lookups if lookups else 0.0,
        }
