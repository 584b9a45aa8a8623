"""
Pure aggregation over loaded click events.

All dates are UTC calendar days. Datetimes without tzinfo (SQLite drops
it on the way back) are read as UTC.
"""

from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

UNKNOWN_COUNTRY = "Unknown"
DIRECT_REFERRER = "Direct"


def utc_date(value: datetime) -> date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(timezone.utc).date()


def build_timeseries(events: Iterable, window_days: int, today: date) -> List[Dict]:
    """
    Dense daily counts for ``[today - (window_days - 1), today]``, oldest first.

    Every day in the window is present, zero-count days included.
    Events dated outside the window are ignored.
    """
    if window_days < 1:
        raise ValueError(f"window_days must be positive, got {window_days}")

    start = today - timedelta(days=window_days - 1)
    buckets = {start + timedelta(days=offset): 0 for offset in range(window_days)}

    for event in events:
        day = utc_date(event.created_at)
        if day in buckets:
            buckets[day] += 1

    return [{"date": day, "count": count} for day, count in buckets.items()]


def _ranked(values: Iterable[Optional[str]], fallback: str, key: str, limit: Optional[int] = None) -> List[Dict]:
    # most_common() sorts by count only; equal counts keep first-seen order
    counts = Counter(value or fallback for value in values)
    return [{key: label, "count": count} for label, count in counts.most_common(limit)]


def geo_breakdown(events: Iterable) -> List[Dict]:
    """Counts per country, descending; missing country is 'Unknown'."""
    return _ranked((event.country for event in events), UNKNOWN_COUNTRY, "country")


def top_referrers(events: Iterable, limit: int = 10) -> List[Dict]:
    """Top ``limit`` referrers by count; no referrer is 'Direct'."""
    return _ranked((event.referrer for event in events), DIRECT_REFERRER, "referrer", limit)
