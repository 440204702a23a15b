"""In-process query caching, batching and deferred-task layer for the workshop backend."""

from carbot.container import Container, container
from carbot.errors import BatchError, CarbotError, QueryExecutionError, ValidationError
from carbot.models import MISS, HealthStatus
from carbot.repositories import CacheStore, DatabaseClient, DuckDBClient
from carbot.services import (
    AsyncProcessor,
    BatchQuery,
    PerformanceMonitor,
    QueryOptimizer,
    WorkshopQueries,
)

__version__ = "0.1.0"

__all__ = [
    # Container
    "Container",
    "container",
    # Errors
    "CarbotError",
    "ValidationError",
    "QueryExecutionError",
    "BatchError",
    # Models
    "MISS",
    "HealthStatus",
    # Repositories
    "CacheStore",
    "DatabaseClient",
    "DuckDBClient",
    # Services
    "QueryOptimizer",
    "BatchQuery",
    "PerformanceMonitor",
    "AsyncProcessor",
    "WorkshopQueries",
]
