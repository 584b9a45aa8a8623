from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import date, datetime


class StatsSummary(BaseModel):
    code: str
    short_url: str
    target_url: str
    created_at: datetime
    # All-time counter from the link row, not limited to the loaded events
    click_count: int


class DailyCount(BaseModel):
    date: date
    count: int


class CountryCount(BaseModel):
    country: str
    count: int


class ReferrerCount(BaseModel):
    referrer: str
    count: int


class ClickRecord(BaseModel):
    id: int
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatsResponse(BaseModel):
    summary: StatsSummary
    timeseries: List[DailyCount]
    geo: List[CountryCount]
    top_referrers: List[ReferrerCount]
    recent_clicks: List[ClickRecord]
