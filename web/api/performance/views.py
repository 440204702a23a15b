"""Performance API views - thin layer over the performance monitor."""

from carbot.container import container

from .schemas import DatabaseHealthResponse, HealthScoresResponse, PerformanceStatsResponse


def get_performance_stats() -> PerformanceStatsResponse:
    """Get query performance stats."""
    return PerformanceStatsResponse(**container.monitor.get_performance_stats())


def get_database_health() -> DatabaseHealthResponse:
    """Get database health verdict."""
    return DatabaseHealthResponse(**container.monitor.get_database_health())


def get_health_scores() -> HealthScoresResponse:
    """Get database and cache health scores."""
    return HealthScoresResponse(**container.monitor.get_health_scores())
