"""
Test configuration and fixtures for the shortener.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from main import create_app
from tinyhawk_app.config import Settings
from tinyhawk_app.database.connection import Base, create_session_factory
from tinyhawk_app.geo.models import GeoLocation
from tinyhawk_app.tasks.strategies import InlineTaskExecutor
from fakes import FakeGeoLookup


@pytest.fixture(scope="function")
def engine():
    """
    Fresh in-memory database per test.
    StaticPool keeps a single connection so every session sees the same data.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def geo_lookup():
    return FakeGeoLookup(GeoLocation(country="Germany", region="Hesse", city="Frankfurt am Main"))


@pytest.fixture(scope="function")
def executor():
    return InlineTaskExecutor()


@pytest.fixture(scope="function")
def test_settings():
    return Settings(
        environment="test",
        base_url="http://sho.rt",
        task_executor="inline",
        geo_provider="null",
        geo_cache_backend="null",
    )


@pytest.fixture(scope="function")
def client(test_settings, session_factory, executor, geo_lookup):
    """
    Test client backed by the in-memory store, the inline executor
    (click recording finishes before the response) and the fake geo provider.
    """
    app = create_app(
        app_settings=test_settings,
        session_factory=session_factory,
        executor=executor,
        geo_lookup=geo_lookup,
    )
    with TestClient(app) as test_client:
        yield test_client
