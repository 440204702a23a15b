"""Services package - query layer, deferred tasks and workshop lookups."""

from carbot.services.query import BatchQuery, PerformanceMonitor, QueryOptimizer
from carbot.services.tasks import AsyncProcessor
from carbot.services.workshop import WorkshopQueries

__all__ = [
    # Query
    "BatchQuery",
    "PerformanceMonitor",
    "QueryOptimizer",
    # Tasks
    "AsyncProcessor",
    # Workshop
    "WorkshopQueries",
]
