"""Unit tests for tenant branch HTTP routes."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from tenancy.application.services import TenantIsolationService
from tenancy.domain.value_objects import (
    BranchInfo,
    BranchTableSummary,
    QueryResult,
    TenantBranch,
)
from tenancy.ports.exceptions import BranchQueryError

CONNECTION_STRING = "postgresql://owner:pw@ep-rw.neon.test/neondb?sslmode=require"


@pytest.fixture
def mock_service() -> AsyncMock:
    """Mock TenantIsolationService for testing."""
    service = AsyncMock(spec=TenantIsolationService)
    service.is_branching_configured = MagicMock(return_value=True)
    return service


@pytest.fixture
def test_client(mock_service: AsyncMock) -> TestClient:
    """Create TestClient with mocked dependencies."""
    from tenancy.dependencies import get_tenant_isolation_service
    from tenancy.presentation import router

    app = FastAPI()
    app.dependency_overrides[get_tenant_isolation_service] = lambda: mock_service
    app.include_router(router)

    return TestClient(app)


class TestCreateBranchRoute:
    def test_creates_branch_returns_201(
        self, test_client: TestClient, mock_service: AsyncMock
    ) -> None:
        mock_service.create_tenant_branch.return_value = TenantBranch(
            branch_id="br-1",
            branch_name="app-proj-42",
            endpoint_host="ep-rw.neon.test",
            connection_string=CONNECTION_STRING,
            created_at="2026-01-05T10:00:00Z",
        )

        response = test_client.post(
            "/branches", json={"tenant_id": "proj-42", "display_name": "Project 42"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        result = response.json()
        assert result["branch_id"] == "br-1"
        assert result["connection_string"] == CONNECTION_STRING
        mock_service.create_tenant_branch.assert_awaited_once_with("proj-42", "Project 42")

    def test_unconfigured_returns_503(
        self, test_client: TestClient, mock_service: AsyncMock
    ) -> None:
        mock_service.is_branching_configured.return_value = False

        response = test_client.post("/branches", json={"tenant_id": "proj-42"})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["detail"] == "Database branching is not configured"
        mock_service.create_tenant_branch.assert_not_awaited()

    def test_failed_creation_returns_503(
        self, test_client: TestClient, mock_service: AsyncMock
    ) -> None:
        mock_service.create_tenant_branch.return_value = None

        response = test_client.post("/branches", json={"tenant_id": "proj-42"})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["detail"] == "Failed to create tenant branch"

    def test_requires_tenant_id(self, test_client: TestClient) -> None:
        response = test_client.post("/branches", json={"tenant_id": ""})

        assert response.status_code == 422


class TestListAndDeleteRoutes:
    def test_lists_branches(self, test_client: TestClient, mock_service: AsyncMock) -> None:
        mock_service.list_tenant_branches.return_value = [
            BranchInfo(branch_id="br-1", name="app-proj-42", current_state="ready")
        ]

        response = test_client.get("/branches")

        assert response.json() == {
            "branches": [
                {
                    "id": "br-1",
                    "name": "app-proj-42",
                    "created_at": None,
                    "current_state": "ready",
                    "parent_id": None,
                }
            ],
            "configured": True,
        }

    def test_deletes_branch(self, test_client: TestClient, mock_service: AsyncMock) -> None:
        mock_service.delete_tenant_branch.return_value = False

        response = test_client.delete("/branches/br-404")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"deleted": False}
        mock_service.delete_tenant_branch.assert_awaited_once_with("br-404")


class TestBranchStatementRoutes:
    def test_query_returns_rows(self, test_client: TestClient, mock_service: AsyncMock) -> None:
        mock_service.execute_on_branch.return_value = QueryResult(
            rows=[{"n": 1}], row_count=1
        )

        response = test_client.post(
            "/branches/query",
            json={"connection_string": CONNECTION_STRING, "query": "SELECT 1 AS n"},
        )

        assert response.json() == {"rows": [{"n": 1}], "row_count": 1}

    def test_query_failure_returns_400(
        self, test_client: TestClient, mock_service: AsyncMock
    ) -> None:
        mock_service.execute_on_branch.side_effect = BranchQueryError(
            'syntax error at or near "SELEC"'
        )

        response = test_client.post(
            "/branches/query",
            json={"connection_string": CONNECTION_STRING, "query": "SELEC 1"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == 'Query failed: syntax error at or near "SELEC"'

    def test_lists_branch_tables(
        self, test_client: TestClient, mock_service: AsyncMock
    ) -> None:
        mock_service.get_branch_tables.return_value = [
            BranchTableSummary(name="customers", columns=["id"], row_count=4)
        ]

        response = test_client.post(
            "/branches/tables", json={"connection_string": CONNECTION_STRING}
        )

        assert response.json() == [{"name": "customers", "columns": ["id"], "row_count": 4}]
