"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().

Export files carry timestamps as ISO-8601 strings with millisecond
precision and a ``Z`` suffix (e.g. ``2024-05-01T09:30:00.000Z``), the
format browser clients produce with ``Date.toISOString()``.
"""

from collections.abc import Mapping
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

# Firestore timestamps serialized outside the SDK arrive as {seconds, nanoseconds}.
_TIMESTAMP_MAP_KEYS = (
    frozenset({"seconds", "nanoseconds"}),
    frozenset({"_seconds", "_nanoseconds"}),
)


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12
        - datetime.now(UTC) - correct but verbose

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume it's UTC and attach timezone
        return dt.replace(tzinfo=UTC)

    # Aware datetime - convert to UTC
    return dt.astimezone(UTC)


def from_timestamp_utc(timestamp: float) -> datetime:
    """
    Create a UTC-aware datetime from a Unix timestamp.
    Use instead of datetime.fromtimestamp() which returns naive local time.

    Args:
        timestamp: Unix timestamp (seconds since epoch)

    Returns:
        UTC-aware datetime
    """
    return datetime.fromtimestamp(timestamp, tz=UTC)


def is_native_timestamp(value: Any) -> bool:
    """Return True for values the store hands back as timestamps.

    That is ``datetime``/``date`` objects and ``{seconds, nanoseconds}``
    maps (with or without leading underscores).
    """
    if isinstance(value, (datetime, date)):
        return True
    if isinstance(value, Mapping) and frozenset(value.keys()) in _TIMESTAMP_MAP_KEYS:
        return all(isinstance(v, int) and not isinstance(v, bool) for v in value.values())
    return False


def to_iso_string(value: Any) -> str | None:
    """
    Normalize a timestamp-like value to an ISO-8601 UTC string.

    - None returns None
    - str is assumed to already be ISO-8601 and is returned unchanged
    - datetime (naive treated as UTC), date (midnight UTC) and
      {seconds, nanoseconds} maps are formatted as YYYY-MM-DDTHH:MM:SS.mmmZ

    Raises:
        TypeError: For any other value type.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        dt = ensure_utc(value)
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min, tzinfo=UTC)
    elif is_native_timestamp(value):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds"))
        dt = from_timestamp_utc(seconds) + timedelta(microseconds=nanos // 1000)
    else:
        raise TypeError(f"Not a timestamp value: {type(value).__name__}")
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{dt.microsecond // 1000:03d}Z"


def normalize_timestamps(value: Any) -> Any:
    """Replace every native timestamp inside value with its ISO string.

    Maps and lists are walked but keep their shape; other values are
    returned unchanged.
    """
    if is_native_timestamp(value):
        return to_iso_string(value)
    if isinstance(value, Mapping):
        return {k: normalize_timestamps(v) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize_timestamps(v) for v in value]
    return value


def iso_date(dt: datetime) -> str:
    """Return the UTC calendar date of dt as YYYY-MM-DD (used in export file names)."""
    return ensure_utc(dt).strftime("%Y-%m-%d")
