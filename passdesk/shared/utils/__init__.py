"""Shared utilities: datetime normalization and concurrency helpers."""

from passdesk.shared.utils.concurrency import Settled, settle_all
from passdesk.shared.utils.datetime import (
    ensure_utc,
    from_timestamp_utc,
    iso_date,
    normalize_timestamps,
    to_iso_string,
    utc_now,
)

__all__ = [
    "Settled",
    "settle_all",
    "utc_now",
    "ensure_utc",
    "from_timestamp_utc",
    "iso_date",
    "normalize_timestamps",
    "to_iso_string",
]
