"""Dependency Injection container - initialized at app startup."""

from carbot.repositories.cache import CacheStore
from carbot.repositories.db import DatabaseClient, DuckDBClient
from carbot.services.query.monitor import PerformanceMonitor
from carbot.services.query.optimizer import QueryOptimizer
from carbot.services.tasks.scheduler import AsyncProcessor
from carbot.services.workshop.queries import WorkshopQueries
from settings.logging import setup_logging


class Container:
    """Application DI container - holds the process-wide instances."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def init(self, db: DatabaseClient | None = None, log_level: str | None = None, log_to_file: bool = True) -> None:
        """Initialize all dependencies. Call once at app startup.

        Logging is configured only when `log_level` is given, so embedding
        applications keep their own loguru sinks.
        """
        if self._initialized:
            return

        if log_level is not None:
            setup_logging(level=log_level, to_file=log_to_file)

        # Shared state
        self.cache = CacheStore()
        self.monitor = PerformanceMonitor(cache=self.cache)

        # Services (with injected state)
        self.optimizer = QueryOptimizer(cache=self.cache, monitor=self.monitor)
        self.async_processor = AsyncProcessor()

        self.db = db if db is not None else DuckDBClient()
        self.workshop = WorkshopQueries(optimizer=self.optimizer, db=self.db)

        self._initialized = True

    def reset(self) -> None:
        """Forget all instances so the next init() starts fresh."""
        for name in ("cache", "monitor", "optimizer", "async_processor", "db", "workshop"):
            self.__dict__.pop(name, None)
        self._initialized = False


# Global container instance
container = Container()
