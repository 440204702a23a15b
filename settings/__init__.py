"""Application settings."""

import os
from pathlib import Path

# Database
DB_PATH = os.getenv("CARBOT_DB_PATH", "carbot.duckdb")

# Logging
LOG_DIR = Path(os.getenv("CARBOT_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("CARBOT_LOG_LEVEL", "INFO")

# Query cache (seconds)
CACHE_TTL = float(os.getenv("CARBOT_CACHE_TTL", "300"))
CACHE_SWEEP_THRESHOLD = int(os.getenv("CARBOT_CACHE_SWEEP_THRESHOLD", "100"))

# Performance monitor
SLOW_QUERY_MS = float(os.getenv("CARBOT_SLOW_QUERY_MS", "500"))
SLOW_QUERY_LOG_SIZE = 50
RECENT_SLOW_QUERIES = 10

# Deferred tasks
SCHEDULER_MAX_WAIT = float(os.getenv("CARBOT_SCHEDULER_MAX_WAIT", "1.0"))
_max_pending = os.getenv("CARBOT_SCHEDULER_MAX_PENDING")
SCHEDULER_MAX_PENDING = int(_max_pending) if _max_pending else None

# Workshop query TTLs (seconds)
LEADS_TTL = 2 * 60
ANALYTICS_TTL = 5 * 60
WORKSHOP_CONTEXT_TTL = 10 * 60
