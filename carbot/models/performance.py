"""Performance monitoring entities."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from carbot.models.common import BaseEntity


class HealthStatus(StrEnum):
    """Coarse database health verdict."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class QueryStat(BaseEntity):
    """Execution counters for one cache key."""

    key: str
    count: int = 0
    total_time_ms: float = 0.0
    error_count: int = 0

    @property
    def average_time_ms(self) -> float:
        return self.total_time_ms / self.count if self.count else 0.0


@dataclass
class SlowQueryRecord(BaseEntity):
    """Miss-path execution slower than the slow-query threshold."""

    key: str
    time_ms: float
    timestamp: datetime
    error_message: str | None = None
