"""Deferred task services."""

from carbot.services.tasks.scheduler import AsyncProcessor

__all__ = [
    "AsyncProcessor",
]
