"""
FastAPI dependencies for dependency injection.

Shared resources (session factory, background executor, geo provider)
are created once by ``create_app`` and live on ``app.state``; these
functions hand them to services per request.

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (build the app with fakes)
- Flexible (swap implementations via config)
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from tinyhawk_app.config import Settings
from tinyhawk_app.database.connection import get_db
from tinyhawk_app.geo.strategies import GeoLookupStrategy
from tinyhawk_app.services.analytics_service import AnalyticsService
from tinyhawk_app.services.link_service import LinkService
from tinyhawk_app.services.redirect_service import RedirectService
from tinyhawk_app.services.short_code_factory import ShortCodeFactory, ShortCodeStrategyType
from tinyhawk_app.tasks.strategies import TaskExecutor


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> sessionmaker:
    return request.app.state.session_factory


def get_executor(request: Request) -> TaskExecutor:
    return request.app.state.executor


def get_geo_lookup(request: Request) -> GeoLookupStrategy:
    return request.app.state.geo_lookup


def get_base_url(request: Request, app_settings: Settings = Depends(get_settings)) -> str:
    """
    Configured public base URL, else the one the request came in on.

    Behind a TLS-terminating proxy the request arrives as http, so the
    scheme from X-Forwarded-Proto (first entry, http or https only) wins.
    """
    if app_settings.base_url:
        return app_settings.base_url.rstrip("/")

    base_url = request.base_url
    forwarded_proto = request.headers.get("x-forwarded-proto", "").split(",")[0].strip().lower()
    if forwarded_proto in ("http", "https"):
        base_url = base_url.replace(scheme=forwarded_proto)
    return str(base_url).rstrip("/")


def get_link_service(
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
) -> LinkService:
    strategy = ShortCodeFactory.create_strategy(
        ShortCodeStrategyType(app_settings.short_code_strategy)
    )
    return LinkService(
        db=db,
        short_code_strategy=strategy,
        code_length=app_settings.short_code_length,
        max_retries=app_settings.max_retries,
    )


def get_redirect_service(
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
    executor: TaskExecutor = Depends(get_executor),
    geo_lookup: GeoLookupStrategy = Depends(get_geo_lookup),
    app_settings: Settings = Depends(get_settings),
) -> RedirectService:
    return RedirectService(
        db=db,
        session_factory=session_factory,
        executor=executor,
        geo_lookup=geo_lookup,
        geo_timeout=app_settings.geo_timeout,
    )


def get_analytics_service(
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
) -> AnalyticsService:
    return AnalyticsService(
        db=db,
        event_limit=app_settings.stats_event_limit,
        recent_limit=app_settings.stats_recent_limit,
        referrer_limit=app_settings.top_referrer_limit,
    )
