# tests/conftest.py
import os

# Set up test environment variables BEFORE any other imports
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("STORE_BACKEND", "sqlalchemy")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.config import EnvironmentEnum, Settings
from app.domains.project.service import ProjectService
from app.main import create_app
from tests.factories import ProjectRowFactory
from tests.fakes import FrozenClock, InMemoryRowStore


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def test_settings():
    """Settings isolated from the developer's environment."""
    return Settings(
        environment=EnvironmentEnum.testing,
        database_url="sqlite+aiosqlite:///:memory:",
        _env_file=None,
    )


@pytest.fixture
def sample_rows():
    """Three stored projects in fetch order."""
    return [
        ProjectRowFactory(
            name="Website Redesign",
            assigned_to="Alice Martin",
            budget=100.0,
            status="active",
            start_date="2025-01-10",
            end_date="2025-03-31",
            next_meeting="2025-06-03T09:00:00+00:00",
        ),
        ProjectRowFactory(
            name="Mobile App",
            assigned_to="Bob Stone",
            budget=50.0,
            status="completed",
            start_date="2024-11-01",
            end_date=None,
            next_meeting=None,
        ),
        ProjectRowFactory(
            name="Data Platform",
            assigned_to="alice cooper",
            budget=250.0,
            status="waiting",
            start_date="2025-05-01",
            end_date="2025-12-31",
            next_meeting="2025-05-20T15:00:00+00:00",
        ),
    ]


@pytest.fixture
def store(sample_rows):
    return InMemoryRowStore(sample_rows)


@pytest.fixture
def empty_store():
    return InMemoryRowStore()


@pytest_asyncio.fixture
async def service(store, clock):
    """Collection loaded from the sample rows."""
    service = ProjectService(store, clock)
    await service.load()
    return service


@pytest_asyncio.fixture
async def client(test_settings, service):
    """HTTP client for an app with the loaded collection already mounted.

    ``ASGITransport`` does not run the lifespan, so the collection is set on
    the application state directly.
    """
    app = create_app(test_settings, store=service.store)
    app.state.project_service = service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
