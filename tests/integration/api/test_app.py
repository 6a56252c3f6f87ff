"""Integration tests for application wiring: health, middleware, error handling."""

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_correlation_id_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Correlation-ID": "cid_test"})

    assert response.headers["X-Correlation-ID"] == "cid_test"


@pytest.mark.asyncio
async def test_correlation_id_generated(client: AsyncClient):
    response = await client.get("/health")

    assert response.headers["X-Correlation-ID"].startswith("cid_")


@pytest.mark.asyncio
async def test_unhandled_error_is_generic(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/boom")

    assert response.status_code == 500
    assert "hunter2" not in response.text


def test_components_on_state(app):
    assert app.state.authenticator.store is app.state.credential_store
    assert app.state.token_service.store is app.state.credential_store
    assert app.state.token_service.expires_in == 5 * 60 * 60
