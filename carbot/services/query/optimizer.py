"""Query optimizer - cache-aside execution and batching over the cache store."""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from carbot.errors import BatchError, ValidationError, validate_key, validate_seconds
from carbot.models.cache import MISS
from carbot.repositories.cache import CacheStore
from carbot.services.query.monitor import PerformanceMonitor

QueryFn = Callable[[], Awaitable[Any]]


@dataclass
class BatchQuery:
    """One named query in a batch."""

    key: str
    fn: QueryFn
    ttl: float | None = None


def _as_batch_query(query: BatchQuery | Mapping[str, Any]) -> BatchQuery:
    if isinstance(query, BatchQuery):
        return query
    if isinstance(query, Mapping):
        return BatchQuery(key=query["key"], fn=query["fn"], ttl=query.get("ttl"))
    raise ValidationError(f"Invalid batch query: {query!r}")


def _check_query(key: str, query_fn: Any, ttl: float | None) -> None:
    validate_key(key)
    validate_seconds(ttl, "ttl")
    if not callable(query_fn):
        raise ValidationError(f"Query function for {key} is not callable")


def is_error_result(result: Any) -> bool:
    """True if a resolved result carries a truthy `error` field."""
    if isinstance(result, Mapping):
        return bool(result.get("error"))
    return bool(getattr(result, "error", None))


class QueryOptimizer:
    """Cache-aside wrapper around caller-supplied query functions.

    Hits are served from the cache store and are invisible to the monitor.
    Misses are timed and reported; successful results without an error field
    are written back. Concurrent misses on one key share a single execution.
    """

    def __init__(
        self,
        cache: CacheStore,
        monitor: PerformanceMonitor,
        default_ttl: float | None = None,
        timer: Callable[[], float] = time.perf_counter,
    ):
        self._cache = cache
        self._monitor = monitor
        self.default_ttl = cache.default_ttl if default_ttl is None else default_ttl
        self._timer = timer
        self._inflight: dict[str, asyncio.Future] = {}
        logger.debug("QueryOptimizer: default_ttl={}s", self.default_ttl)

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @property
    def monitor(self) -> PerformanceMonitor:
        return self._monitor

    async def execute_optimized_query(self, key: str, query_fn: QueryFn, ttl: float | None = None) -> Any:
        """Return cached result for `key`, or run `query_fn` and cache it."""
        _check_query(key, query_fn, ttl)

        cached = self._cache.get(key)
        if cached is not MISS:
            return cached
        return await self._execute_miss(key, query_fn, ttl)

    async def _execute_miss(self, key: str, query_fn: QueryFn, ttl: float | None) -> Any:
        """Run a query already known to be uncached, joining any in-flight run."""
        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._execute(key, query_fn, ttl))
            self._inflight[key] = pending
        else:
            logger.debug("Joining in-flight query: {}", key)

        return await asyncio.shield(pending)

    async def _execute(self, key: str, query_fn: QueryFn, ttl: float | None) -> Any:
        started = self._timer()
        try:
            result = await query_fn()
        except Exception as e:
            self._monitor.track_query_performance(key, (self._timer() - started) * 1000, e)
            raise
        finally:
            self._inflight.pop(key, None)

        self._monitor.track_query_performance(key, (self._timer() - started) * 1000)
        if result is not None and not is_error_result(result):
            self._cache.set(key, result, self.default_ttl if ttl is None else ttl)
        else:
            logger.debug("Not caching {}: empty or error result", key)
        return result

    async def batch_queries(self, queries: Iterable[BatchQuery | Mapping[str, Any]]) -> dict[str, Any]:
        """Serve cached keys directly, run the rest concurrently.

        Fails as a whole with BatchError if any uncached query fails.
        """
        results: dict[str, Any] = {}
        uncached: list[BatchQuery] = []

        for query in map(_as_batch_query, queries):
            _check_query(query.key, query.fn, query.ttl)
            cached = self._cache.get(query.key)
            if cached is not MISS:
                results[query.key] = cached
            else:
                uncached.append(query)

        if not uncached:
            return results

        async def run(query: BatchQuery) -> Any:
            try:
                return await self._execute_miss(query.key, query.fn, query.ttl)
            except Exception as e:
                raise BatchError(query.key, e) from e

        logger.debug("Batch: {} cached, {} to execute", len(results), len(uncached))
        values = await asyncio.gather(*(run(q) for q in uncached))
        results.update(zip((q.key for q in uncached), values))
        return results
