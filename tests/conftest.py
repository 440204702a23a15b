"""Shared fixtures."""

import asyncio

import pytest
from loguru import logger

from carbot.repositories.cache import CacheStore
from carbot.services.query.monitor import PerformanceMonitor
from carbot.services.query.optimizer import QueryOptimizer


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDatabaseClient:
    """In-memory DatabaseClient recording every select."""

    def __init__(self, tables: dict | None = None, delay: float = 0.0, error: str | None = None):
        self.tables = tables or {}
        self.delay = delay
        self.error = error
        self.calls: list[dict] = []

    async def select(
        self,
        table,
        columns=None,
        *,
        eq=None,
        gte=None,
        lte=None,
        order_by=None,
        descending=False,
        limit=None,
        offset=None,
        single=False,
    ):
        self.calls.append(
            {
                "table": table,
                "columns": columns,
                "eq": eq,
                "gte": gte,
                "lte": lte,
                "order_by": order_by,
                "descending": descending,
                "limit": limit,
                "offset": offset,
                "single": single,
            }
        )
        await asyncio.sleep(self.delay)
        if self.error:
            return {"data": None, "error": self.error}

        rows = [r for r in self.tables.get(table, []) if all(r.get(k) == v for k, v in (eq or {}).items())]
        if single:
            if len(rows) != 1:
                return {"data": None, "error": f"Expected 1 row from {table}, got {len(rows)}"}
            return {"data": rows[0], "error": None}
        return {"data": rows, "error": None}


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def cache(clock):
    return CacheStore(default_ttl=300, sweep_threshold=100, clock=clock)


@pytest.fixture
def monitor(cache):
    return PerformanceMonitor(cache=cache)


@pytest.fixture
def optimizer(cache, monitor):
    return QueryOptimizer(cache=cache, monitor=monitor)


@pytest.fixture
def log_messages():
    """Capture loguru output."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.rstrip("\n")), level="DEBUG", format="{level} | {message}")
    yield messages
    logger.remove(handler_id)
