"""Timestamp normalization to ISO-8601 UTC strings."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from passdesk.shared.utils.datetime import (
    ensure_utc,
    iso_date,
    is_native_timestamp,
    normalize_timestamps,
    to_iso_string,
)


def test_aware_datetime_formats_with_milliseconds_and_z() -> None:
    dt = datetime(2024, 5, 1, 9, 30, 0, 123456, tzinfo=UTC)
    assert to_iso_string(dt) == "2024-05-01T09:30:00.123Z"


def test_non_utc_datetime_is_converted() -> None:
    dt = datetime(2024, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=3)))
    assert to_iso_string(dt) == "2024-05-01T09:00:00.000Z"


def test_naive_datetime_is_treated_as_utc() -> None:
    assert to_iso_string(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05.000Z"
    assert ensure_utc(datetime(2024, 1, 2)).tzinfo is UTC


def test_date_is_midnight_utc() -> None:
    assert to_iso_string(date(2024, 2, 29)) == "2024-02-29T00:00:00.000Z"


def test_seconds_nanoseconds_map() -> None:
    value = {"seconds": 1714555800, "nanoseconds": 250_000_000}
    assert is_native_timestamp(value)
    assert to_iso_string(value) == "2024-05-01T09:30:00.250Z"
    assert to_iso_string({"_seconds": 0, "_nanoseconds": 0}) == "1970-01-01T00:00:00.000Z"


def test_strings_and_none_pass_through() -> None:
    assert to_iso_string("2024-05-01T09:30:00.000Z") == "2024-05-01T09:30:00.000Z"
    assert to_iso_string("not a date") == "not a date"
    assert to_iso_string(None) is None


def test_other_types_are_rejected() -> None:
    with pytest.raises(TypeError):
        to_iso_string(1714555800)


def test_maps_that_only_look_like_timestamps_are_not_converted() -> None:
    assert not is_native_timestamp({"seconds": 5})
    assert not is_native_timestamp({"seconds": 5, "nanoseconds": "0"})
    assert not is_native_timestamp({"seconds": 5, "nanoseconds": 0, "label": "x"})


def test_normalize_walks_nested_maps_and_lists() -> None:
    data = {
        "createdAt": datetime(2024, 5, 1, tzinfo=UTC),
        "name": "Ana",
        "history": [
            {"at": {"seconds": 0, "nanoseconds": 0}, "status": "new"},
            "raw",
        ],
        "count": 3,
    }
    assert normalize_timestamps(data) == {
        "createdAt": "2024-05-01T00:00:00.000Z",
        "name": "Ana",
        "history": [{"at": "1970-01-01T00:00:00.000Z", "status": "new"}, "raw"],
        "count": 3,
    }


def test_normalize_keeps_field_order() -> None:
    data = {"b": 1, "a": datetime(2024, 5, 1, tzinfo=UTC), "c": 2}
    assert list(normalize_timestamps(data)) == ["b", "a", "c"]


def test_iso_date_uses_utc_calendar_day() -> None:
    late = datetime(2024, 5, 1, 23, 30, tzinfo=timezone(timedelta(hours=-3)))
    assert iso_date(late) == "2024-05-02"
