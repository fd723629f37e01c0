"""Unit tests for main FastAPI application configuration.

Tests health endpoints, route registration and the lifespan hooks that
configure logging and close shared resources.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from asgi_lifespan import LifespanManager
from fastapi.testclient import TestClient

from infrastructure.database.dependencies import get_write_engine
from main import app


@pytest.fixture
def test_client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _engine(conn=None, error: Exception | None = None) -> MagicMock:
    engine = MagicMock()
    if error is not None:
        engine.connect.return_value.__aenter__.side_effect = error
    else:
        engine.connect.return_value.__aenter__.return_value = conn or AsyncMock()
    return engine


class TestHealthEndpoints:
    def test_health(self, test_client: TestClient) -> None:
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_health_db_connected(self, test_client: TestClient) -> None:
        conn = AsyncMock()
        app.dependency_overrides[get_write_engine] = lambda: _engine(conn)

        response = test_client.get("/health/db")

        assert response.json() == {"status": "ok", "connected": True}
        conn.execute.assert_awaited_once()

    def test_health_db_unreachable(self, test_client: TestClient) -> None:
        app.dependency_overrides[get_write_engine] = lambda: _engine(
            error=OSError("connection refused")
        )

        response = test_client.get("/health/db")

        assert response.status_code == 200
        assert response.json() == {
            "status": "error",
            "connected": False,
            "error": "connection refused",
        }


class TestRouteRegistration:
    def test_bounded_context_routes_are_mounted(self) -> None:
        paths = {route.path for route in app.routes}

        assert "/projects/{tenant_id}/database" in paths
        assert "/projects/{tenant_id}/database/tables/{table_name}/rows" in paths
        assert "/branches" in paths
        assert "/branches/query" in paths


class TestLifespan:
    @pytest.mark.asyncio
    async def test_configures_logging_and_closes_resources(self) -> None:
        with (
            patch("main.configure_logging") as configure_logging,
            patch("main.close_database_connections", new_callable=AsyncMock) as close_db,
            patch("main.close_branch_pools", new_callable=AsyncMock) as close_pools,
        ):
            async with LifespanManager(app):
                configure_logging.assert_called_once()
                close_db.assert_not_awaited()

            close_db.assert_awaited_once()
            close_pools.assert_awaited_once()
