"""Errors raised by the query layer."""


class CarbotError(Exception):
    """Base error."""

    def __init__(self, message: str = "Query layer error"):
        self.message = message
        super().__init__(self.message)


class ValidationError(CarbotError):
    """Invalid argument passed to a component."""

    def __init__(self, message: str = "Validation error"):
        super().__init__(message)


class QueryExecutionError(CarbotError):
    """Database query returned an error."""

    def __init__(self, message: str = "Query failed", key: str | None = None):
        self.key = key
        super().__init__(message)


class BatchError(CarbotError):
    """A query inside a batch failed; the whole batch is rejected."""

    def __init__(self, key: str, cause: BaseException):
        self.key = key
        super().__init__(f"Batch query '{key}' failed: {cause}")


def validate_key(key: str) -> None:
    """Validate cache key is a non-empty string."""
    if not isinstance(key, str) or not key:
        raise ValidationError(f"Invalid cache key: {key!r}. Must be a non-empty string")


def validate_seconds(value: float | None, name: str) -> None:
    """Validate an optional duration is non-negative."""
    if value is not None and value < 0:
        raise ValidationError(f"Invalid {name}: {value}. Must be >= 0")
