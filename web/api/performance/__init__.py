"""Performance API."""

from web.api.performance.views import get_database_health, get_health_scores, get_performance_stats

__all__ = [
    "get_performance_stats",
    "get_database_health",
    "get_health_scores",
]
