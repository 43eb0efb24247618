"""Shared fixtures for API tests."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sellerdesk.infrastructure.database import get_session
from sellerdesk.main import app
from sellerdesk.pos.barcode import ScanLogger


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client bound to the test database."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    scan_logger = ScanLogger(session_factory)
    app.dependency_overrides[get_session] = override_get_session
    app.state.scan_logger = scan_logger

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Request-ID": "api-test-request"},
    ) as client:
        yield client

    await scan_logger.drain()
    app.dependency_overrides.clear()
    del app.state.scan_logger
