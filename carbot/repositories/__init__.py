"""Repositories package - cache store and database access."""

from carbot.repositories.cache import CacheStore
from carbot.repositories.db import (
    DatabaseClient,
    DuckDBClient,
    build_select,
    init_tables,
)

__all__ = [
    # Cache
    "CacheStore",
    # DB
    "DatabaseClient",
    "DuckDBClient",
    "build_select",
    "init_tables",
]
