from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tinyhawk_app.config import settings
from tinyhawk_app.errors import InvalidInputError, NotFoundError, StorageError
from tinyhawk_app.models.click_event import ClickEvent
from tinyhawk_app.models.short_link import ShortLink
from tinyhawk_app.schemas.stats import ClickRecord, StatsResponse, StatsSummary
from tinyhawk_app.services.aggregation import build_timeseries, geo_breakdown, top_referrers


class AnalyticsService:
    """
    Computes link statistics on demand from raw click events.

    Breakdowns only cover the newest ``event_limit`` events, while the
    summary reports the all-time ``click_count`` from the link row. This
    keeps stats requests bounded no matter how popular a link gets.
    """

    def __init__(
        self,
        db: Session,
        event_limit: Optional[int] = None,
        recent_limit: Optional[int] = None,
        referrer_limit: Optional[int] = None,
    ):
        self.db = db
        self.event_limit = event_limit if event_limit is not None else settings.stats_event_limit
        self.recent_limit = recent_limit if recent_limit is not None else settings.stats_recent_limit
        self.referrer_limit = referrer_limit if referrer_limit is not None else settings.top_referrer_limit

    async def get_stats(
        self,
        code: str,
        days: int = 30,
        base_url: str = "",
        today: Optional[date] = None,
    ) -> StatsResponse:
        """Build the stats payload for ``code``.

        Raises:
            InvalidInputError: days < 1
            NotFoundError: unknown code
            StorageError: query failed
        """
        if days < 1:
            raise InvalidInputError("days must be at least 1")

        try:
            link = self.db.query(ShortLink).filter(ShortLink.code == code).first()
            if link is None:
                raise NotFoundError(f"short code '{code}' not found")

            events = (
                self.db.query(ClickEvent)
                .filter(ClickEvent.link_id == link.id)
                .order_by(ClickEvent.created_at.desc(), ClickEvent.id.desc())
                .limit(self.event_limit)
                .all()
            )
        except SQLAlchemyError as exc:
            raise StorageError("failed to load click events") from exc

        if today is None:
            today = datetime.now(timezone.utc).date()

        return StatsResponse(
            summary=StatsSummary(
                code=link.code,
                short_url=f"{base_url}/{link.code}",
                target_url=link.target_url,
                created_at=link.created_at,
                click_count=link.click_count,
            ),
            timeseries=build_timeseries(events, days, today),
            geo=geo_breakdown(events),
            top_referrers=top_referrers(events, self.referrer_limit),
            recent_clicks=[
                ClickRecord.model_validate(event) for event in events[:self.recent_limit]
            ],
        )
