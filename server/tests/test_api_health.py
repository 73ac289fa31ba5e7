"""API health tests against the fully configured application."""

import pytest
from httpx import ASGITransport, AsyncClient

from tourdesk.core.database import get_db
from tourdesk.main import create_app


@pytest.mark.asyncio
async def test_api_health_endpoints(test_session):
    """Health, readiness and info on the real app, with the test database."""
    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "X-Request-ID" in response.headers

        response = await client.get("/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"database": "ok"}

        response = await client.get("/info")
        assert response.status_code == 200
        data = response.json()
        assert data["service"]
        assert "version" in data
        assert "en" in data["languages"]
        assert set(data["features"]) == {"payments", "aiTranslation", "uploads"}


@pytest.mark.asyncio
async def test_request_id_is_echoed():
    """A caller-supplied request id comes back on the response."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health", headers={"X-Request-ID": "req-abc-123"})
        assert response.headers["X-Request-ID"] == "req-abc-123"


@pytest.mark.asyncio
async def test_metrics_endpoint():
    """Test the metrics endpoint."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_openapi_docs():
    """Test that OpenAPI docs are available in development."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/docs")
        # Should be available in development mode
        assert response.status_code == 200
