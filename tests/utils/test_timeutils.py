# tests/utils/test_timeutils.py
from datetime import date, datetime, timezone

import pytest

from event_analytics.utils.timeutils import ensure_utc, parse_bound


def test_ensure_utc_localizes_naive():
    naive = datetime(2024, 1, 1, 8, 0)

    assert ensure_utc(naive) == datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
    assert ensure_utc(None) is None


def test_parse_bound_date_only():
    assert parse_bound("2024-05-10") == datetime(2024, 5, 10, tzinfo=timezone.utc)
    end = parse_bound("2024-05-10", end_of_day=True)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


def test_parse_bound_datetime_with_zulu():
    assert parse_bound("2024-05-10T10:15:00Z") == datetime(2024, 5, 10, 10, 15, tzinfo=timezone.utc)


def test_parse_bound_passes_through_objects():
    assert parse_bound(date(2024, 5, 10)) == datetime(2024, 5, 10, tzinfo=timezone.utc)
    assert parse_bound(None) is None
    assert parse_bound("") is None


def test_parse_bound_rejects_garbage():
    with pytest.raises(ValueError):
        parse_bound("yesterday")


def test_parse_bound_converts_offsets_to_utc():
    bound = parse_bound("2024-05-10T12:00:00+02:00")

    assert bound.utcoffset().total_seconds() == 0
    assert bound.hour == 10
