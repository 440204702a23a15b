"""Workshop queries - cached lookups for leads, analytics and workshop context."""

import json
from datetime import datetime, timedelta, timezone
from typing import Any

from loguru import logger

from carbot.errors import QueryExecutionError
from carbot.repositories.db import DatabaseClient
from carbot.services.query.optimizer import BatchQuery, QueryOptimizer
from settings import ANALYTICS_TTL, LEADS_TTL, WORKSHOP_CONTEXT_TTL

LEAD_COLUMNS = [
    "id",
    "kunde_id",
    "name",
    "telefon",
    "anliegen",
    "fahrzeug",
    "status",
    "priority",
    "timestamp",
    "workshop_id",
]

WORKSHOP_COLUMNS = [
    "id",
    "name",
    "slug",
    "owner_email",
    "city",
    "subscription_plan",
    "current_period_start",
    "current_period_end",
]

TIME_RANGES = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_RANGE_DAYS = 7

DEFAULT_PAGE_SIZE = 50


def leads_cache_key(filters: dict[str, Any] | None = None) -> str:
    """Deterministic key for a leads filter set, e.g. `leads:{"status":"new"}`."""
    return "leads:" + json.dumps(
        filters or {}, separators=(",", ":"), sort_keys=True, ensure_ascii=False, default=str
    )


class WorkshopQueries:
    """Request-path lookups routed through the query optimizer."""

    def __init__(self, optimizer: QueryOptimizer, db: DatabaseClient):
        self._optimizer = optimizer
        self._db = db

    async def get_leads(self, filters: dict[str, Any] | None = None) -> dict[str, Any]:
        """Leads newest first, filtered by status, priority, workshop and date range."""
        filters = filters or {}

        async def fetch() -> dict[str, Any]:
            eq = {col: filters[col] for col in ("status", "priority", "workshop_id") if filters.get(col)}
            limit = filters.get("limit")
            offset = filters.get("offset")
            if offset and not limit:
                limit = DEFAULT_PAGE_SIZE

            return await self._db.select(
                "leads",
                LEAD_COLUMNS,
                eq=eq,
                gte={"timestamp": filters["date_from"]} if filters.get("date_from") else None,
                lte={"timestamp": filters["date_to"]} if filters.get("date_to") else None,
                order_by="timestamp",
                descending=True,
                limit=limit,
                offset=offset,
            )

        return await self._optimizer.execute_optimized_query(leads_cache_key(filters), fetch, LEADS_TTL)

    async def get_analytics(self, customer_slug: str, time_range: str = "7d") -> dict[str, Any]:
        """Chat, lead and AI-usage data for a customer over 7, 30 or 90 days."""
        cache_key = f"analytics:{customer_slug}:{time_range}"

        async def fetch() -> dict[str, Any]:
            end = datetime.now(timezone.utc).replace(tzinfo=None)
            start = end - timedelta(days=TIME_RANGES.get(time_range, DEFAULT_RANGE_DAYS))

            def window(table: str, columns: list[str], owner: str, ts: str):
                return lambda: self._db.select(
                    table,
                    columns,
                    eq={owner: customer_slug},
                    gte={ts: start},
                    lte={ts: end},
                )

            queries = {
                "chat_stats": window("chat_messages", ["created_at", "message_type"], "client_key", "created_at"),
                "lead_stats": window("leads", ["timestamp", "status", "source_url"], "kunde_id", "timestamp"),
                "performance_stats": window(
                    "ai_usage_logs", ["response_time_ms", "tokens_used"], "client_key", "created_at"
                ),
            }
            results = await self._optimizer.batch_queries(
                BatchQuery(key=f"{cache_key}:{name}", fn=fn) for name, fn in queries.items()
            )
            return {name: results[f"{cache_key}:{name}"] for name in queries}

        return await self._optimizer.execute_optimized_query(cache_key, fetch, ANALYTICS_TTL)

    async def get_workshop_context(self, workshop_id: str) -> dict[str, Any]:
        """Single workshop row with subscription fields."""
        cache_key = f"workshop_context:{workshop_id}"

        async def fetch() -> dict[str, Any]:
            result = await self._db.select("workshops", WORKSHOP_COLUMNS, eq={"id": workshop_id}, single=True)
            if result.get("error"):
                logger.warning("Workshop context {} failed: {}", workshop_id, result["error"])
                raise QueryExecutionError(str(result["error"]), key=cache_key)
            return result["data"]

        return await self._optimizer.execute_optimized_query(cache_key, fetch, WORKSHOP_CONTEXT_TTL)
