"""Common models - base classes."""

from carbot.models.common.base import BaseEntity

__all__ = [
    "BaseEntity",
]
