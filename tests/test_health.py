"""Tests for the health check endpoint."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestHealthEndpoint:
    async def test_health_reports_database(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code in (200, 503)
        data = response.json()
        assert set(data) == {"status", "version", "database", "cache_entries"}

    async def test_health_unavailable_database(self, async_client: AsyncClient):
        with patch(
            "moviecatalog.api.health.check_db_connection", AsyncMock(return_value=False)
        ):
            response = await async_client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"

    async def test_health_reports_cache_size(self, async_client: AsyncClient, cache):
        await cache.set("BLOCK_TOKEN_x", {"sub": "1"}, 60_000)

        response = await async_client.get("/health")

        assert response.json()["cache_entries"] == 1

    async def test_health_needs_no_token(self, async_client: AsyncClient):
        with patch("moviecatalog.api.health.check_db_connection", AsyncMock(return_value=True)):
            response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
