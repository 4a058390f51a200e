# tests/services/test_analytics_service.py
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import redis

from event_analytics.core.exceptions import ValidationError
from event_analytics.schemas.event import EventCreate
from event_analytics.services.analytics_service import AnalyticsService, build_cache_key
from event_analytics.services.cache_service import NullCache, RedisCache

BASE_TIME = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def ingest(event_service, registered_app):
    """Record an event for the registered app."""
    def _ingest(application=None, **fields):
        return event_service.ingest(application or registered_app, EventCreate(**fields))
    return _ingest


def test_summary_without_matches(analytics_service):
    summary = analytics_service.get_event_summary(event="never_happened")

    assert summary == {"event": "never_happened", "count": 0, "uniqueUsers": 0, "deviceData": {}}


def test_summary_without_matches_or_filter(analytics_service):
    summary = analytics_service.get_event_summary()

    assert summary == {"event": None, "count": 0, "uniqueUsers": 0, "deviceData": {}}


def test_summary_counts_devices(analytics_service, ingest):
    ingest(event="click", user_id="u1", device="mobile")
    ingest(event="click", user_id="u2", device="desktop")

    summary = analytics_service.get_event_summary(event="click")
    assert summary["deviceData"] == {"mobile": 1, "desktop": 1}

    ingest(event="click", user_id="u3", device="mobile")
    fresh = AnalyticsService(analytics_service.db, cache=NullCache())

    assert fresh.get_event_summary(event="click")["deviceData"] == {"mobile": 2, "desktop": 1}


def test_summary_unique_users(analytics_service, ingest):
    ingest(event="signup", user_id="u1")
    ingest(event="signup", user_id="u1")
    ingest(event="signup", user_id="u2")
    ingest(event="signup")

    summary = analytics_service.get_event_summary(event="signup")

    assert summary["count"] == 4
    assert summary["uniqueUsers"] == 2
    assert summary["deviceData"] == {}


def test_summary_single_event_scenario(analytics_service, ingest):
    ingest(event="click", user_id="u1", device="mobile")

    summary = analytics_service.get_event_summary(event="click")

    assert summary == {"event": "click", "count": 1, "uniqueUsers": 1, "deviceData": {"mobile": 1}}


def test_summary_filters_by_application(analytics_service, api_key_service, ingest, registered_app):
    other_app = api_key_service.register(name="Other App")
    ingest(event="click", user_id="u1")
    ingest(application=other_app, event="click", user_id="u2")
    ingest(application=other_app, event="click", user_id="u3")

    own = analytics_service.get_event_summary(event="click", app_id=str(registered_app.id))
    other = analytics_service.get_event_summary(event="click", app_id=str(other_app.id))

    assert own["count"] == 1
    assert other["count"] == 2


def test_summary_ignores_malformed_app_id(analytics_service, ingest):
    ingest(event="click")
    ingest(event="click")

    summary = analytics_service.get_event_summary(event="click", app_id="definitely-not-an-id")

    assert summary["count"] == 2


def test_summary_date_bounds_are_inclusive(analytics_service, ingest):
    ingest(event="view", timestamp=BASE_TIME - timedelta(days=2))
    ingest(event="view", timestamp=BASE_TIME)
    ingest(event="view", timestamp=BASE_TIME + timedelta(hours=6))
    ingest(event="view", timestamp=BASE_TIME + timedelta(days=2))

    exact = analytics_service.get_event_summary(
        event="view",
        start_date=BASE_TIME.isoformat(),
        end_date=(BASE_TIME + timedelta(hours=6)).isoformat(),
    )
    by_day = analytics_service.get_event_summary(
        event="view", start_date="2024-05-10", end_date="2024-05-10"
    )
    open_ended = analytics_service.get_event_summary(event="view", start_date="2024-05-09")

    assert exact["count"] == 2
    assert by_day["count"] == 2
    assert open_ended["count"] == 3


def test_summary_rejects_malformed_dates(analytics_service):
    with pytest.raises(ValidationError):
        analytics_service.get_event_summary(start_date="last tuesday")


def test_summary_without_event_filter_reports_busiest_event(analytics_service, ingest):
    ingest(event="page_view", device="desktop")
    ingest(event="page_view", device="desktop")
    ingest(event="click", device="mobile")

    summary = analytics_service.get_event_summary()

    assert summary == {"event": "page_view", "count": 2, "uniqueUsers": 0, "deviceData": {"desktop": 2}}


def test_summary_is_cached_with_ttl(analytics_service, memory_cache, ingest):
    ingest(event="click", device="mobile")

    first = analytics_service.get_event_summary(event="click")
    ingest(event="click", device="mobile")
    second = analytics_service.get_event_summary(event="click")

    # Writes never invalidate; the cached value is served until the TTL lapses
    assert second == first
    assert second["count"] == 1
    assert list(memory_cache.ttls.values()) == [30]


def test_cache_hit_returned_verbatim(analytics_service, memory_cache):
    key = build_cache_key("evsum", {"event": "click", "app_id": None, "start": None, "end": None})
    planted = {"event": "click", "count": 99, "uniqueUsers": 7, "deviceData": {"tv": 99}}
    memory_cache.store[key] = json.dumps(planted).encode()

    assert analytics_service.get_event_summary(event="click") == planted


def test_cache_keys_do_not_collide():
    base = {"event": None, "app_id": None, "start": None, "end": None}
    keys = {
        build_cache_key("evsum", base),
        build_cache_key("evsum", {**base, "event": "all"}),
        build_cache_key("evsum", {**base, "event": "0"}),
        build_cache_key("evsum", {**base, "start": "2024-01-01T00:00:00+00:00"}),
        build_cache_key("evsum", {**base, "end": "2024-01-01T00:00:00+00:00"}),
    }
    assert len(keys) == 5
    assert build_cache_key("evsum", base) == build_cache_key("evsum", dict(base))


def test_distinct_filters_cached_separately(analytics_service, memory_cache, ingest):
    ingest(event="all", device="mobile")
    ingest(event="other", device="desktop")
    ingest(event="other", device="desktop")

    named_all = analytics_service.get_event_summary(event="all")
    unfiltered = analytics_service.get_event_summary()

    assert named_all["count"] == 1
    assert unfiltered["event"] == "other"
    assert len(memory_cache.store) == 2


def test_results_correct_when_cache_is_down(db_session, ingest):
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("Connection refused")
    client.setex.side_effect = redis.ConnectionError("Connection refused")
    service = AnalyticsService(db_session, cache=RedisCache(client=client, retry_interval=0))

    ingest(event="click", user_id="u1", device="mobile")

    assert service.get_event_summary(event="click")["count"] == 1
    assert service.get_user_stats("u1")["totalEvents"] == 1


def test_user_stats_requires_user_id(analytics_service):
    with pytest.raises(ValidationError) as exc_info:
        analytics_service.get_user_stats(None)
    assert exc_info.value.message == "userId required"


def test_user_stats_limits_recent_events(analytics_service, ingest):
    for i in range(25):
        ingest(event="view", user_id="heavy", timestamp=BASE_TIME + timedelta(minutes=i))

    stats = analytics_service.get_user_stats("heavy")

    assert stats["userId"] == "heavy"
    assert stats["totalEvents"] == 25
    assert len(stats["recentEvents"]) == 20
    timestamps = [e["timestamp"] for e in stats["recentEvents"]]
    parsed = [datetime.fromisoformat(t.replace("Z", "+00:00")) for t in timestamps]
    assert parsed == sorted(parsed, reverse=True)
    assert parsed[0] == BASE_TIME + timedelta(minutes=24)


def test_user_stats_does_not_expose_api_key(analytics_service, ingest, registered_app):
    ingest(event="view", user_id="u1")

    recent = analytics_service.get_user_stats("u1")["recentEvents"][0]

    assert "apiKey" not in recent
    assert recent["appId"] == str(registered_app.id)
    assert recent["event"] == "view"


def test_user_stats_device_details_follow_scan_order(analytics_service, ingest):
    # Newest event sets browser and os, an older one sets only browser
    ingest(event="view", user_id="u1", ip_address="5.5.5.5",
           metadata={"browser": "Firefox"}, timestamp=BASE_TIME)
    ingest(event="view", user_id="u1", ip_address="9.9.9.9",
           metadata={"browser": "Chrome", "os": "Android"}, timestamp=BASE_TIME + timedelta(hours=1))
    ingest(event="view", user_id="u1", timestamp=BASE_TIME + timedelta(hours=2))

    stats = analytics_service.get_user_stats("u1")

    # Scanning newest to oldest, the older Firefox value overwrites Chrome
    assert stats["deviceDetails"] == {"browser": "Firefox", "os": "Android"}
    assert stats["ipAddress"] == "9.9.9.9"


def test_user_stats_skips_non_object_metadata(analytics_service, ingest):
    ingest(event="a", user_id="u1", timestamp=BASE_TIME, metadata={"browser": "Firefox"})
    ingest(event="b", user_id="u1", timestamp=BASE_TIME + timedelta(minutes=1), metadata=["tag"])
    ingest(event="c", user_id="u1", timestamp=BASE_TIME + timedelta(minutes=2), metadata="raw")

    stats = analytics_service.get_user_stats("u1")

    assert stats["deviceDetails"] == {"browser": "Firefox"}
    assert [e["metadata"] for e in stats["recentEvents"]] == ["raw", ["tag"], {"browser": "Firefox"}]


def test_user_stats_for_unknown_user(analytics_service):
    stats = analytics_service.get_user_stats("ghost")

    assert stats == {
        "userId": "ghost",
        "totalEvents": 0,
        "recentEvents": [],
        "deviceDetails": {},
        "ipAddress": None,
    }


def test_user_stats_cached(analytics_service, memory_cache, ingest):
    ingest(event="view", user_id="u1")
    first = analytics_service.get_user_stats("u1")
    ingest(event="view", user_id="u1")

    assert analytics_service.get_user_stats("u1") == first
    assert any(key.startswith("ustats:") for key in memory_cache.store)
