"""Tests for GET /api/health and the error envelope."""

from httpx import AsyncClient


async def test_health_check(async_client: AsyncClient):
    response = await async_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Request-ID"]


async def test_errors_carry_request_id(async_client: AsyncClient):
    response = await async_client.get("/api/profiles/nobody")

    assert response.status_code == 404
    assert response.json()["error"]["request_id"] == response.headers["X-Request-ID"]
