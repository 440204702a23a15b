"""Query services - cache-aside optimizer, batching and performance monitor."""

from carbot.services.query.monitor import PerformanceMonitor
from carbot.services.query.optimizer import BatchQuery, QueryOptimizer, is_error_result

__all__ = [
    "BatchQuery",
    "PerformanceMonitor",
    "QueryOptimizer",
    "is_error_result",
]
