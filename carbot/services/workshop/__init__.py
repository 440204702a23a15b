"""Workshop services."""

from carbot.services.workshop.queries import WorkshopQueries, leads_cache_key

__all__ = [
    "WorkshopQueries",
    "leads_cache_key",
]
