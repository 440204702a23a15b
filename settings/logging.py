"""Logging configuration.

Besides the console and the daily application log, slow queries get their
own JSON-lines file so they can be analysed after a restart clears the
in-memory slow-query log. Records opt in with `logger.bind(slow_query=True)`.
"""

import sys
from pathlib import Path

from loguru import logger

from settings import LOG_DIR, LOG_LEVEL

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | "
    "<cyan>{name}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {name}:{function}:{line} | {message}"


def is_slow_query(record) -> bool:
    return record["extra"].get("slow_query", False)


def setup_logging(level: str = LOG_LEVEL, to_file: bool = True, log_dir: Path | None = None):
    """Configure console output and, optionally, the application and slow-query files."""
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if not to_file:
        return logger

    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / "carbot_{time:YYYY-MM-DD}.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="00:00",
        retention="7 days",
        compression="gz",
    )
    logger.add(
        log_dir / "slow_queries.jsonl",
        level="WARNING",
        filter=is_slow_query,
        serialize=True,
        rotation="10 MB",
        retention=5,
    )
    logger.info("Logging to {} (level {})", log_dir, level)
    return logger
