"""Performance API response schemas."""

from datetime import datetime

from pydantic import BaseModel

from carbot.models.performance import HealthStatus


class SlowQueryItem(BaseModel):
    """Slow miss-path execution."""

    key: str
    time_ms: float
    timestamp: datetime
    error_message: str | None = None


class QueryBreakdownItem(BaseModel):
    """Per-key execution stats."""

    count: int
    average_time: int
    errors: int


class PerformanceStatsResponse(BaseModel):
    """Aggregated query performance."""

    total_queries: int
    average_time: int
    slow_queries: list[SlowQueryItem]
    query_breakdown: dict[str, QueryBreakdownItem]


class DatabaseHealthResponse(BaseModel):
    """Database health verdict."""

    status: HealthStatus
    average_query_time: int
    total_queries: int
    slow_queries: int
    cache_hit_ratio: int
    recommendations: list[str]


class HealthScoresResponse(BaseModel):
    """Health scores, 0-100."""

    database: int
    cache: int
    overall: int
