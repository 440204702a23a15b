"""Cache entities."""

from dataclasses import dataclass
from typing import Any

from carbot.models.common import BaseEntity


class _Miss:
    """Cache miss marker, distinct from any cacheable value."""

    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS = _Miss()


@dataclass
class CacheEntry(BaseEntity):
    """Cached value with insertion time (clock seconds) and TTL."""

    key: str
    value: Any
    inserted_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.inserted_at

    def is_fresh(self, now: float) -> bool:
        return self.age(now) < self.ttl
