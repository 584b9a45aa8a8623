import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from tinyhawk_app.api.v1 import links, redirect
from tinyhawk_app.cache.factory import CacheBackend, CacheFactory
from tinyhawk_app.config import Settings, settings as default_settings
from tinyhawk_app.database.connection import Base, create_db_engine, create_session_factory
from tinyhawk_app.errors import InvalidInputError, ShortenerError
from tinyhawk_app.geo.factory import GeoLookupFactory, GeoProvider
from tinyhawk_app.geo.strategies import GeoLookupStrategy
from tinyhawk_app.logging_config import configure_logging
from tinyhawk_app.tasks.factory import ExecutorBackend, TaskExecutorFactory
from tinyhawk_app.tasks.strategies import TaskExecutor

# Import models to ensure they're registered with Base
from tinyhawk_app.models import ClickEvent, ShortLink  # noqa: F401

logger = logging.getLogger("tinyhawk_app.main")


def build_geo_lookup(app_settings: Settings) -> GeoLookupStrategy:
    provider = GeoProvider(app_settings.geo_provider)
    cache = None
    if provider != GeoProvider.NULL:
        cache = CacheFactory.create(
            CacheBackend(app_settings.geo_cache_backend),
            redis_url=app_settings.redis_url,
        )
    return GeoLookupFactory.create(
        provider,
        api_key=app_settings.geo_api_key,
        timeout=app_settings.geo_timeout,
        cache=cache,
        cache_ttl=app_settings.geo_cache_ttl,
    )


def create_app(
    app_settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    executor: Optional[TaskExecutor] = None,
    geo_lookup: Optional[GeoLookupStrategy] = None,
) -> FastAPI:
    """
    Build the application.

    Anything not passed in is created from settings. The store, the
    executor and the geo provider are owned by the app (``app.state``)
    and released on shutdown.
    """
    app_settings = app_settings or default_settings
    configure_logging(app_settings.log_level)

    engine = None
    if session_factory is None:
        engine = create_db_engine(app_settings.database_url)
        session_factory = create_session_factory(engine)
    if executor is None:
        executor = TaskExecutorFactory.create(ExecutorBackend(app_settings.task_executor))
    if geo_lookup is None:
        geo_lookup = build_geo_lookup(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: create tables
        Base.metadata.create_all(bind=session_factory.kw["bind"])
        logger.info("%s %s started (%s)", app_settings.app_name, app_settings.app_version,
                    app_settings.environment)
        yield
        # Shutdown: pending enrichment is abandoned, clicks keep empty geo fields
        await executor.shutdown()
        await geo_lookup.aclose()
        if engine is not None:
            engine.dispose()
        logger.info("%s stopped", app_settings.app_name)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="URL shortener with click analytics",
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.session_factory = session_factory
    app.state.executor = executor
    app.state.geo_lookup = geo_lookup

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ShortenerError)
    async def shortener_error_handler(request: Request, exc: ShortenerError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": exc.error},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Same payload shape as InvalidInputError; "body"/"query" prefixes dropped
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
            problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
        return JSONResponse(
            status_code=InvalidInputError.status_code,
            content={"detail": "; ".join(problems) or "invalid request", "error": InvalidInputError.error},
        )

    @app.get("/")
    def read_root():
        """Root endpoint with API information"""
        return {
            "message": f"Welcome to {app_settings.app_name}",
            "version": app_settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc"
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "environment": app_settings.environment}

    ######## Include routers (redirect last: it matches any single segment)
    app.include_router(links.router, prefix="/api/v1")
    app.include_router(redirect.router)

    return app


app = create_app()
