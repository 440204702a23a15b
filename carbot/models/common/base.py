"""Base entity for dataclass models served through the stats endpoints."""

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any


def _json_ready(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result = {}
    for name, value in pairs:
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        result[name] = value
    return result


@dataclass
class BaseEntity:
    def to_dict(self) -> dict[str, Any]:
        """Fields as a JSON-ready dict (datetimes as ISO strings, enums as values)."""
        return asdict(self, dict_factory=_json_ready)
