"""Tests for health check endpoints and request middleware."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from sellerdesk.api.middleware import seller_id_from_path
from sellerdesk.infrastructure.database import get_session
from sellerdesk.main import app


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health endpoint returns healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "sellerdesk-engine"
    assert "version" in data


@pytest.mark.asyncio
async def test_readiness_check(client: AsyncClient) -> None:
    """Test readiness endpoint returns ready status."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_readiness_check_database_down(client: AsyncClient) -> None:
    """Test readiness endpoint reports an unreachable database."""
    broken = MagicMock()
    broken.execute = AsyncMock(side_effect=OSError("connection refused"))

    async def broken_session() -> AsyncGenerator[MagicMock, None]:
        yield broken

    app.dependency_overrides[get_session] = broken_session

    response = await client.get("/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    @pytest.mark.asyncio
    async def test_uses_provided_request_id(self, client: AsyncClient) -> None:
        """Should echo the request ID from request headers."""
        response = await client.get("/health")
        assert response.headers["X-Request-ID"] == "api-test-request"

    @pytest.mark.asyncio
    async def test_generates_request_id_if_not_provided(self, client: AsyncClient) -> None:
        """Should generate a UUID request ID when none is sent."""
        del client.headers["X-Request-ID"]
        response = await client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 36


class TestSellerIdFromPath:
    """Tests for seller id extraction used in log context."""

    def test_seller_routes(self) -> None:
        """Seller-scoped paths yield their seller id."""
        assert seller_id_from_path("/sellers/seller-1/pos/settings") == "seller-1"
        assert seller_id_from_path("/sellers/abc") == "abc"

    def test_other_routes(self) -> None:
        """Paths outside /sellers yield None."""
        assert seller_id_from_path("/pos/sessions/xyz") is None
        assert seller_id_from_path("/health") is None
