"""
Test Suite Configuration
"""
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from dadd_explorer.config import Settings
from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.database.seed import create_schema, seed_sample_data
from dadd_explorer.main import create_app


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
async def gateway() -> AsyncGenerator[QueryGateway, None]:
    """Query gateway over an in-memory database loaded with the sample data"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    gateway = QueryGateway(engine)

    await create_schema(gateway)
    await seed_sample_data(gateway)

    yield gateway

    await engine.dispose()


@pytest.fixture
def app(test_settings, gateway):
    return create_app(settings=test_settings, gateway=gateway)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client calling the application in-process"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
