'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE (in-memory SQLite, UTC) before any code is imported.
2. Providing a fresh, empty store on its own in-memory database for each test.
3. Providing a FastAPI TestClient for endpoint testing.
4. Providing instances of all service classes, pre-injected with the test store.
'''

import os

# Must happen before the settings singleton is created on first import
os.environ["TEST_MODE"] = "True"
os.environ["TIMEZONE"] = "UTC"

import pytest
from typing import AsyncGenerator

# --- FastAPI & Testing Imports ---
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine

# --- Application Imports ---
from src.tutor_center_backend.main import app
from src.tutor_center_backend.common.config import settings
from src.tutor_center_backend.database.engine import build_engine, build_session_factory, create_tables
from src.tutor_center_backend.database.store import TutoringStore
from src.tutor_center_backend.services.roster_service import RosterService
from src.tutor_center_backend.services.scheduler_service import SchedulerService
from src.tutor_center_backend.services.calendar_service import CalendarService
from src.tutor_center_backend.services.class_service import ClassService
from src.tutor_center_backend.services.directory_service import DirectoryService


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    1. Forces the backend to 'asyncio' (aiosqlite has no trio support).
    2. Promotes the scope to 'session' (solves 'ScopeMismatch').
    """
    return "asyncio"


@pytest.fixture(scope="function")
def client() -> TestClient:
    """
    Runs the app's lifespan, which creates a brand-new in-memory database,
    and tears it down again after the test.
    """
    assert settings.TEST_MODE is True, \
        "TEST_MODE was not set to True! Check your .env file or environment."

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# --- 2. Function-Scoped Store Fixtures (For Service Tests) ---

@pytest.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Each test gets its own in-memory database."""
    engine = build_engine(settings.DATABASE_URL_TEST)
    await create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def store(db_engine: AsyncEngine) -> TutoringStore:
    return TutoringStore(build_session_factory(db_engine))


# --- 3. SERVICE FIXTURES ---

@pytest.fixture(scope="function")
def roster_service(store: TutoringStore) -> RosterService:
    return RosterService(store=store)

@pytest.fixture(scope="function")
def scheduler_service(store: TutoringStore) -> SchedulerService:
    return SchedulerService(store=store)

@pytest.fixture(scope="function")
def calendar_service(store: TutoringStore) -> CalendarService:
    return CalendarService(store=store)

@pytest.fixture(scope="function")
def class_service(store: TutoringStore) -> ClassService:
    return ClassService(store=store)

@pytest.fixture(scope="function")
def directory_service(store: TutoringStore) -> DirectoryService:
    return DirectoryService(store=store)

@pytest.fixture(scope="function")
def scheduler_service_sync() -> SchedulerService:
    """
    A store-less SchedulerService for the synchronous form helpers.
    """
    return SchedulerService(store=None)
