"""Deferred task entities."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from carbot.models.common import BaseEntity


@dataclass
class ScheduledTask(BaseEntity):
    """Task waiting for dispatch at `scheduled_for` (clock seconds)."""

    task: Callable[[], Any]
    scheduled_for: float

    @property
    def name(self) -> str:
        return getattr(self.task, "__qualname__", None) or repr(self.task)

    def is_ready(self, now: float) -> bool:
        return self.scheduled_for <= now
