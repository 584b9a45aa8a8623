import asyncio
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tinyhawk_app.config import settings
from tinyhawk_app.errors import EnrichmentFailure, NotFoundError, StorageError
from tinyhawk_app.geo.models import GeoLocation
from tinyhawk_app.geo.strategies import GeoLookupStrategy
from tinyhawk_app.models.click_event import ClickEvent
from tinyhawk_app.models.short_link import ShortLink
from tinyhawk_app.schemas.request import RequestContext
from tinyhawk_app.services.client_ip import extract_client_ip, is_private_ip
from tinyhawk_app.tasks.strategies import TaskExecutor

logger = logging.getLogger(__name__)


class RedirectService:
    """
    Resolves short codes and records clicks.

    Flow:
    1. Look the link up (request session)
    2. Bump click_count with an atomic UPDATE
    3. Hand click recording to the executor and return the target

    Click recording runs in its own sessions because the request session
    is closed once the response is sent:
    1. Insert ClickEvent with empty geo fields
    2. Geo lookup (skipped for private/local IPs, bounded by a timeout)
    3. Update the event once if the lookup returned data
    """

    def __init__(
        self,
        db: Session,
        session_factory: sessionmaker,
        executor: TaskExecutor,
        geo_lookup: GeoLookupStrategy,
        geo_timeout: Optional[float] = None,
    ):
        self.db = db
        self.session_factory = session_factory
        self.executor = executor
        self.geo_lookup = geo_lookup
        self.geo_timeout = geo_timeout if geo_timeout is not None else settings.geo_timeout

    async def resolve_and_record(self, code: str, context: RequestContext) -> str:
        """Return the target URL for ``code`` and schedule click recording.

        Raises:
            NotFoundError: unknown code
            StorageError: lookup or counter update failed
        """
        try:
            link = self.db.query(ShortLink).filter(ShortLink.code == code).first()
            if link is None:
                raise NotFoundError(f"short code '{code}' not found")

            # Increment in SQL so concurrent redirects cannot lose updates
            self.db.execute(
                update(ShortLink)
                .where(ShortLink.id == link.id)
                .values(click_count=ShortLink.click_count + 1)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Redirect lookup failed for %s: %s", code, exc)
            raise StorageError("failed to resolve short code") from exc

        link_id, target_url = link.id, link.target_url
        await self.executor.submit(
            self.record_click(link_id, context), name=f"record-click:{code}"
        )
        return target_url

    async def record_click(self, link_id: int, context: RequestContext) -> None:
        """Persist a click and try to enrich it with geo data."""
        ip = extract_client_ip(context.forwarded_for, context.client_host)
        event_id = self._insert_click(link_id, ip, context)

        if is_private_ip(ip):
            logger.debug("Skipping geo lookup for local address %s", ip)
            return

        try:
            location = await self._lookup(ip)
        except EnrichmentFailure as e:
            logger.warning("Geo enrichment failed for click %d: %s", event_id, e)
            return

        if location is None or location.is_empty():
            return
        self._apply_location(event_id, location)

    def _insert_click(self, link_id: int, ip: Optional[str], context: RequestContext) -> int:
        with self.session_factory() as session:
            event = ClickEvent(
                link_id=link_id,
                ip=ip,
                user_agent=context.user_agent or None,
                referrer=context.referrer or None,
            )
            session.add(event)
            session.commit()
            return event.id

    async def _lookup(self, ip: str) -> Optional[GeoLocation]:
        try:
            return await asyncio.wait_for(self.geo_lookup.lookup(ip), timeout=self.geo_timeout)
        except asyncio.TimeoutError as e:
            raise EnrichmentFailure(f"lookup for {ip} timed out after {self.geo_timeout}s") from e
        except Exception as e:
            raise EnrichmentFailure(f"lookup for {ip} raised {e!r}") from e

    def _apply_location(self, event_id: int, location: GeoLocation) -> None:
        with self.session_factory() as session:
            # Only enrich events that have not been enriched yet
            session.execute(
                update(ClickEvent)
                .where(
                    ClickEvent.id == event_id,
                    ClickEvent.country.is_(None),
                    ClickEvent.region.is_(None),
                    ClickEvent.city.is_(None),
                )
                .values(country=location.country, region=location.region, city=location.city)
            )
            session.commit()
