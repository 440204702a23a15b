"""Models package - entities for cache, performance stats and deferred tasks."""

from carbot.models.cache import MISS, CacheEntry
from carbot.models.common import BaseEntity
from carbot.models.performance import HealthStatus, QueryStat, SlowQueryRecord
from carbot.models.tasks import ScheduledTask

__all__ = [
    # Common
    "BaseEntity",
    # Cache
    "MISS",
    "CacheEntry",
    # Performance
    "HealthStatus",
    "QueryStat",
    "SlowQueryRecord",
    # Tasks
    "ScheduledTask",
]
