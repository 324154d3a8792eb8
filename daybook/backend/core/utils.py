"""
Core Utilities.

Shared utility functions used across the backend.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application are timezone-naive
    and assumed to be UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_timestamp(value: datetime | None) -> str | None:
    """
    Render a timestamp in the single wire format used by the API.

    ISO 8601, UTC, millisecond precision, trailing "Z"
    (e.g. 2024-01-01T09:30:00.000Z). Aware values are converted to UTC first.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"
