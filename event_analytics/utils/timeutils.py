"""Timezone helpers shared by the auth gate and the aggregation queries."""
from datetime import date, datetime, time as dt_time, timezone
from typing import Optional, Union

import pytz


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Interpret naive datetimes (e.g. read back from SQLite) as UTC; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def parse_bound(raw: Union[str, date, datetime, None], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse a date filter bound.

    Accepts ISO-8601 dates ("2024-05-01") or datetimes ("2024-05-01T10:00:00Z").
    A date-only value becomes midnight, or the last instant of that day when
    ``end_of_day`` is set, so an end date covers the whole day.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if raw is None or raw == "":
        return None

    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, date):
        return pytz.UTC.localize(datetime.combine(raw, dt_time.max if end_of_day else dt_time.min))

    text = raw.strip()
    if len(text) == 10:
        day = date.fromisoformat(text)
        return pytz.UTC.localize(datetime.combine(day, dt_time.max if end_of_day else dt_time.min))

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))
