"""Database client - protocol and DuckDB-backed implementation.

Results follow the hosted client's convention: `{"data": ..., "error": ...}`.
Database failures are reported in `error` instead of being raised, so the
query layer can tell "do not cache" results apart from thrown failures.
"""

import asyncio
from pathlib import Path
from typing import Any, Protocol

import duckdb
from loguru import logger

from settings import DB_PATH

WORKSHOPS_DDL = """
CREATE TABLE IF NOT EXISTS workshops (
    id VARCHAR PRIMARY KEY,
    name VARCHAR NOT NULL,
    slug VARCHAR NOT NULL,
    owner_email VARCHAR,
    city VARCHAR,
    subscription_plan VARCHAR,
    current_period_start TIMESTAMP,
    current_period_end TIMESTAMP
)
"""

LEADS_DDL = """
CREATE TABLE IF NOT EXISTS leads (
    id VARCHAR PRIMARY KEY,
    kunde_id VARCHAR,
    name VARCHAR,
    telefon VARCHAR,
    anliegen VARCHAR,
    fahrzeug VARCHAR,
    status VARCHAR,
    priority VARCHAR,
    source_url VARCHAR,
    "timestamp" TIMESTAMP,
    workshop_id VARCHAR
)
"""

CHAT_MESSAGES_DDL = """
CREATE TABLE IF NOT EXISTS chat_messages (
    id VARCHAR PRIMARY KEY,
    client_key VARCHAR NOT NULL,
    message_type VARCHAR,
    created_at TIMESTAMP NOT NULL
)
"""

AI_USAGE_LOGS_DDL = """
CREATE TABLE IF NOT EXISTS ai_usage_logs (
    id VARCHAR PRIMARY KEY,
    client_key VARCHAR NOT NULL,
    response_time_ms INTEGER,
    tokens_used INTEGER,
    created_at TIMESTAMP NOT NULL
)
"""

ALL_DDL = [
    WORKSHOPS_DDL,
    LEADS_DDL,
    CHAT_MESSAGES_DDL,
    AI_USAGE_LOGS_DDL,
]


class DatabaseClient(Protocol):
    """Async select interface the query layer's helpers depend on."""

    async def select(
        self,
        table: str,
        columns: list[str] | None = None,
        *,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
        lte: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        single: bool = False,
    ) -> dict[str, Any]: ...


def init_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Initialize all tables from DDL statements (idempotent - uses IF NOT EXISTS)."""
    for ddl in ALL_DDL:
        conn.execute(ddl)
    logger.info("DB tables initialized")


def _identifier(name: str) -> str:
    if not name.replace("_", "").isalnum():
        raise ValueError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


def build_select(
    table: str,
    columns: list[str] | None = None,
    *,
    eq: dict[str, Any] | None = None,
    gte: dict[str, Any] | None = None,
    lte: dict[str, Any] | None = None,
    order_by: str | None = None,
    descending: bool = False,
    limit: int | None = None,
    offset: int | None = None,
) -> tuple[str, list]:
    """Build a parameterized SELECT statement."""
    cols = ", ".join(_identifier(c) for c in columns) if columns else "*"
    query = f"SELECT {cols} FROM {_identifier(table)}"

    clauses, params = [], []
    for op, conditions in (("=", eq), (">=", gte), ("<=", lte)):
        for column, value in (conditions or {}).items():
            clauses.append(f"{_identifier(column)} {op} ?")
            params.append(value)
    if clauses:
        query += " WHERE " + " AND ".join(clauses)

    if order_by:
        query += f" ORDER BY {_identifier(order_by)}" + (" DESC" if descending else "")
    if limit is not None:
        query += f" LIMIT {int(limit)}"
    if offset:
        query += f" OFFSET {int(offset)}"
    return query, params


class DuckDBClient:
    """DatabaseClient over a local DuckDB file, for development and tests."""

    def __init__(self, path: str | Path = DB_PATH, read_only: bool = False):
        self._path = str(path)
        self._conn = duckdb.connect(self._path, read_only=read_only)
        if not read_only:
            init_tables(self._conn)
        logger.debug("DB connected: {} (read_only={})", self._path, read_only)

    def close(self) -> None:
        """Close the connection."""
        self._conn.close()
        logger.debug("DB connection closed")

    def execute(self, query: str, params: list | None = None) -> Any:
        """Execute SQL synchronously (seeding, migrations)."""
        if params:
            return self._conn.execute(query, params)
        return self._conn.execute(query)

    def _fetch(self, query: str, params: list) -> list[dict[str, Any]]:
        cursor = self._conn.cursor()
        try:
            result = cursor.execute(query, params)
            names = [d[0] for d in result.description]
            return [dict(zip(names, row)) for row in result.fetchall()]
        finally:
            cursor.close()

    async def select(
        self,
        table: str,
        columns: list[str] | None = None,
        *,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
        lte: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        single: bool = False,
    ) -> dict[str, Any]:
        """Run a SELECT off the event loop."""
        query, params = build_select(
            table,
            columns,
            eq=eq,
            gte=gte,
            lte=lte,
            order_by=order_by,
            descending=descending,
            limit=limit,
            offset=offset,
        )
        try:
            rows = await asyncio.to_thread(self._fetch, query, params)
        except duckdb.Error as e:
            logger.warning("Query on {} failed: {}", table, e)
            return {"data": None, "error": str(e)}

        if not single:
            return {"data": rows, "error": None}
        if len(rows) != 1:
            return {"data": None, "error": f"Expected 1 row from {table}, got {len(rows)}"}
        return {"data": rows[0], "error": None}
