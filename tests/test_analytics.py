"""
Tests for stats aggregation and the analytics service.
"""
import asyncio
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from tinyhawk_app.errors import InvalidInputError, NotFoundError
from tinyhawk_app.models.click_event import ClickEvent
from tinyhawk_app.models.short_link import ShortLink
from tinyhawk_app.services.aggregation import build_timeseries, geo_breakdown, top_referrers
from tinyhawk_app.services.analytics_service import AnalyticsService

TODAY = date(2024, 5, 20)


def at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


def event(created_at=None, country=None, referrer=None):
    return SimpleNamespace(created_at=created_at or at(TODAY), country=country, referrer=referrer)


class TestTimeseries:
    def test_dense_window_oldest_first(self):
        d = TODAY
        events = [event(at(d - timedelta(days=2))), event(at(d - timedelta(days=2))),
                  event(at(d - timedelta(days=1))), event(at(d))]

        series = build_timeseries(events, window_days=3, today=d)

        assert [point["date"] for point in series] == [
            d - timedelta(days=2), d - timedelta(days=1), d
        ]
        assert [point["count"] for point in series] == [2, 1, 1]

    def test_zero_days_included(self):
        series = build_timeseries([], window_days=30, today=TODAY)

        assert len(series) == 30
        assert series[0]["date"] == TODAY - timedelta(days=29)
        assert series[-1]["date"] == TODAY
        assert all(point["count"] == 0 for point in series)

    def test_events_outside_window_ignored(self):
        events = [event(at(TODAY - timedelta(days=10))), event(at(TODAY + timedelta(days=1))),
                  event(at(TODAY))]

        series = build_timeseries(events, window_days=3, today=TODAY)

        assert len(series) == 3
        assert sum(point["count"] for point in series) == 1

    def test_uses_utc_calendar_day(self):
        # 23:30 at UTC-5 on the 19th is 04:30 UTC on the 20th
        local = datetime(2024, 5, 19, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        naive_utc = datetime(2024, 5, 19, 23, 59)

        series = build_timeseries([event(local), event(naive_utc)], window_days=2, today=TODAY)

        assert [point["count"] for point in series] == [1, 1]

    def test_window_must_be_positive(self):
        with pytest.raises(ValueError):
            build_timeseries([], window_days=0, today=TODAY)


class TestBreakdowns:
    def test_geo_breakdown(self):
        events = [event(country="US"), event(country="US"), event(country="FR"), event(country=None)]

        assert geo_breakdown(events) == [
            {"country": "US", "count": 2},
            {"country": "FR", "count": 1},
            {"country": "Unknown", "count": 1},
        ]

    def test_geo_breakdown_empty(self):
        assert geo_breakdown([]) == []

    def test_referrers_direct_and_truncated(self):
        events = [event(referrer=None)] * 3
        events += [event(referrer=f"https://site{i}.example/") for i in range(12)]
        events += [event(referrer="https://site0.example/")]

        ranked = top_referrers(events, limit=10)

        assert len(ranked) == 10
        assert ranked[0] == {"referrer": "Direct", "count": 3}
        assert ranked[1] == {"referrer": "https://site0.example/", "count": 2}
        assert all(row["count"] == 1 for row in ranked[2:])


class TestAnalyticsService:
    @pytest.fixture
    def link(self, db_session):
        link = ShortLink(
            code="stats1",
            target_url="https://www.example.com/",
            click_count=42,
            created_at=at(TODAY - timedelta(days=60)),
        )
        db_session.add(link)
        db_session.commit()
        return link

    def add_events(self, db_session, link, rows):
        for created_at, country, referrer in rows:
            db_session.add(ClickEvent(link_id=link.id, created_at=created_at,
                                      country=country, referrer=referrer, ip="8.8.8.8"))
        db_session.commit()

    def test_full_stats(self, db_session, link):
        self.add_events(db_session, link, [
            (at(TODAY - timedelta(days=2)), "US", None),
            (at(TODAY - timedelta(days=2), hour=13), "US", "https://t.co/"),
            (at(TODAY - timedelta(days=1)), "FR", "https://t.co/"),
            (at(TODAY), None, None),
        ])
        service = AnalyticsService(db_session)

        stats = asyncio.run(service.get_stats("stats1", days=3, base_url="http://sho.rt", today=TODAY))

        assert stats.summary.code == "stats1"
        assert stats.summary.short_url == "http://sho.rt/stats1"
        assert stats.summary.target_url == "https://www.example.com/"
        # All-time counter, not the number of loaded events
        assert stats.summary.click_count == 42
        assert [point.count for point in stats.timeseries] == [2, 1, 1]
        assert [(row.country, row.count) for row in stats.geo] == [("US", 2), ("FR", 1), ("Unknown", 1)]
        assert {(row.referrer, row.count) for row in stats.top_referrers} == {
            ("https://t.co/", 2), ("Direct", 2)
        }
        # Newest first
        assert [click.country for click in stats.recent_clicks] == [None, "FR", "US", "US"]

    def test_breakdowns_cover_only_newest_events(self, db_session, link):
        old = [(at(TODAY - timedelta(days=5)), "OLD", None)] * 5
        new = [(at(TODAY), "NEW", None)] * 3
        self.add_events(db_session, link, old + new)
        service = AnalyticsService(db_session, event_limit=3, recent_limit=2)

        stats = asyncio.run(service.get_stats("stats1", days=7, today=TODAY))

        assert [(row.country, row.count) for row in stats.geo] == [("NEW", 3)]
        assert len(stats.recent_clicks) == 2
        assert sum(point.count for point in stats.timeseries) == 3

    def test_zero_limits_are_honoured(self, db_session, link):
        self.add_events(db_session, link, [(at(TODAY), "US", "https://t.co/")] * 2)
        service = AnalyticsService(db_session, recent_limit=0, referrer_limit=0)

        stats = asyncio.run(service.get_stats("stats1", days=1, today=TODAY))

        assert stats.recent_clicks == []
        assert stats.top_referrers == []
        assert [(row.country, row.count) for row in stats.geo] == [("US", 2)]

    def test_zero_event_limit_loads_nothing(self, db_session, link):
        self.add_events(db_session, link, [(at(TODAY), "US", None)])
        service = AnalyticsService(db_session, event_limit=0)

        stats = asyncio.run(service.get_stats("stats1", days=1, today=TODAY))

        assert stats.geo == []
        assert stats.summary.click_count == 42

    def test_no_clicks(self, db_session, link):
        service = AnalyticsService(db_session)

        stats = asyncio.run(service.get_stats("stats1", days=30, today=TODAY))

        assert len(stats.timeseries) == 30
        assert stats.geo == []
        assert stats.top_referrers == []
        assert stats.recent_clicks == []

    def test_unknown_code(self, db_session):
        service = AnalyticsService(db_session)

        with pytest.raises(NotFoundError):
            asyncio.run(service.get_stats("doesnotexist"))

    def test_bad_window(self, db_session, link):
        service = AnalyticsService(db_session)

        with pytest.raises(InvalidInputError):
            asyncio.run(service.get_stats("stats1", days=0))
