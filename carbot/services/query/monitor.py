"""Performance monitor - per-key query stats, slow-query log and health verdict."""

from collections import deque
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from carbot.models.performance import HealthStatus, QueryStat, SlowQueryRecord
from carbot.repositories.cache import CacheStore
from settings import RECENT_SLOW_QUERIES, SLOW_QUERY_LOG_SIZE, SLOW_QUERY_MS

HEALTHY_BELOW_MS = 200
WARNING_BELOW_MS = 500
INDEX_HINT_ABOVE_MS = 300
SLOW_QUERY_HINT_ABOVE = 5
ERROR_RATE_HINT_ABOVE = 0.05

RECOMMEND_INDEXES = "Consider adding database indexes for frequently queried fields"
RECOMMEND_TUNING = "Optimize slow queries or increase cache TTL"
RECOMMEND_CONNECTION = "High error rate detected - check database connection stability"


class PerformanceMonitor:
    """Aggregates miss-path timings reported by the query optimizer.

    Cache hits never reach the monitor. Stats live for the lifetime of the
    instance and only grow; slow queries are kept in a bounded FIFO log.
    """

    def __init__(
        self,
        cache: CacheStore | None = None,
        slow_threshold_ms: float = SLOW_QUERY_MS,
        slow_log_size: int = SLOW_QUERY_LOG_SIZE,
        recent_slow: int = RECENT_SLOW_QUERIES,
    ):
        self._cache = cache
        self.slow_threshold_ms = slow_threshold_ms
        self.recent_slow = recent_slow
        self._stats: dict[str, QueryStat] = {}
        self._slow_queries: deque[SlowQueryRecord] = deque(maxlen=slow_log_size)
        self._slow_total = 0
        logger.debug("PerformanceMonitor: slow_threshold={}ms, slow_log_size={}", slow_threshold_ms, slow_log_size)

    def track_query_performance(self, key: str, time_ms: float, error: BaseException | None = None) -> None:
        """Record one miss-path execution. Never raises."""
        try:
            stat = self._stats.get(key)
            if stat is None:
                stat = self._stats[key] = QueryStat(key=key)
            stat.count += 1
            stat.total_time_ms += time_ms
            if error is not None:
                stat.error_count += 1

            if time_ms > self.slow_threshold_ms:
                self._slow_queries.append(
                    SlowQueryRecord(
                        key=key,
                        time_ms=time_ms,
                        timestamp=datetime.now(timezone.utc),
                        error_message=str(error) if error is not None else None,
                    )
                )
                self._slow_total += 1
                logger.bind(slow_query=True, key=key, time_ms=time_ms).warning(
                    "Slow query: {} took {:.0f}ms", key, time_ms
                )
        except Exception as e:
            logger.warning("Failed to track query {}: {}", key, e)

    @property
    def slow_queries(self) -> list[SlowQueryRecord]:
        """Slow-query log, oldest first."""
        return list(self._slow_queries)

    def query_stat(self, key: str) -> QueryStat | None:
        return self._stats.get(key)

    def reset(self) -> None:
        """Drop all stats and the slow-query log."""
        self._stats.clear()
        self._slow_queries.clear()
        self._slow_total = 0
        logger.info("Performance stats reset")

    def _totals(self) -> tuple[int, float, int]:
        count = sum(s.count for s in self._stats.values())
        time_ms = sum(s.total_time_ms for s in self._stats.values())
        errors = sum(s.error_count for s in self._stats.values())
        return count, time_ms, errors

    def get_performance_stats(self) -> dict[str, Any]:
        """Global average, recent slow queries and per-key breakdown."""
        total_queries, total_time, _ = self._totals()
        recent = list(self._slow_queries)[-self.recent_slow :] if self.recent_slow else []

        return {
            "total_queries": total_queries,
            "average_time": round(total_time / total_queries) if total_queries else 0,
            "slow_queries": [r.to_dict() for r in recent],
            "query_breakdown": {
                key: {
                    "count": s.count,
                    "average_time": round(s.average_time_ms),
                    "errors": s.error_count,
                }
                for key, s in self._stats.items()
            },
        }

    def _cache_hit_rate(self) -> float | None:
        if self._cache is None:
            return None
        stats = self._cache.stats
        if not stats["hits"] + stats["misses"]:
            return None
        return stats["hit_rate"] * 100

    def get_database_health(self) -> dict[str, Any]:
        """Coarse health verdict with heuristic recommendations."""
        try:
            total_queries, total_time, errors = self._totals()
            average = round(total_time / total_queries) if total_queries else 0
            slow_count = len(self._slow_queries)

            if average < HEALTHY_BELOW_MS:
                status = HealthStatus.HEALTHY
            elif average < WARNING_BELOW_MS:
                status = HealthStatus.WARNING
            else:
                status = HealthStatus.CRITICAL

            recommendations = []
            if average > INDEX_HINT_ABOVE_MS:
                recommendations.append(RECOMMEND_INDEXES)
            if slow_count > SLOW_QUERY_HINT_ABOVE:
                recommendations.append(RECOMMEND_TUNING)
            if total_queries and errors / total_queries > ERROR_RATE_HINT_ABOVE:
                recommendations.append(RECOMMEND_CONNECTION)

            hit_rate = self._cache_hit_rate()
            return {
                "status": status,
                "average_query_time": average,
                "total_queries": total_queries,
                "slow_queries": slow_count,
                "cache_hit_ratio": round(hit_rate) if hit_rate is not None else 0,
                "recommendations": recommendations,
            }
        except Exception as e:
            logger.warning("Health check failed: {}", e)
            return {
                "status": HealthStatus.CRITICAL,
                "average_query_time": 0,
                "total_queries": 0,
                "slow_queries": 0,
                "cache_hit_ratio": 0,
                "recommendations": [],
            }

    def get_health_scores(self) -> dict[str, int]:
        """Database, cache and overall scores, 0-100."""
        total_queries, total_time, errors = self._totals()

        database = 100.0
        if total_queries:
            average = total_time / total_queries
            if average > 50:
                database -= min(40, (average - 50) / 5)

            error_pct = errors / total_queries * 100
            if error_pct > 0.5:
                database -= min(30, (error_pct - 0.5) * 10)

            slow_pct = self._slow_total / total_queries * 100
            if slow_pct > 2:
                database -= min(10, (slow_pct - 2) * 2)

        cache = 100.0
        hit_rate = self._cache_hit_rate()
        if hit_rate is not None and hit_rate < 85:
            cache -= min(50, (85 - hit_rate) * 2)

        database = max(0, round(database))
        cache = max(0, round(cache))
        return {
            "database": database,
            "cache": cache,
            "overall": round((database + cache) / 2),
        }
