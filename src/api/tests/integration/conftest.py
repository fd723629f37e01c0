"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance.
Use docker-compose for testing.
"""

from collections.abc import AsyncGenerator
import os
import uuid

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.engines import create_write_engine
from infrastructure.settings import DatabaseSettings
from provisioning.application.services import SchemaProvisioningService
from provisioning.infrastructure.ddl import DdlBuilder
from provisioning.infrastructure.tenant_schema_repository import (
    TenantSchemaRepository,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        SCHEMAFORGE_DB_HOST, SCHEMAFORGE_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("SCHEMAFORGE_DB_HOST", "localhost"),
        port=int(os.getenv("SCHEMAFORGE_DB_PORT", "5432")),
        database=os.getenv("SCHEMAFORGE_DB_DATABASE", "schemaforge"),
        username=os.getenv("SCHEMAFORGE_DB_USERNAME", "schemaforge"),
        password=SecretStr(
            os.getenv("SCHEMAFORGE_DB_PASSWORD", "schemaforge_dev_password")
        ),
    )


@pytest_asyncio.fixture
async def engine(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncEngine, None]:
    """Provide a shared-database engine, disposed after each test."""
    engine = create_write_engine(integration_db_settings)
    yield engine
    await engine.dispose()


@pytest.fixture
def tenant_id() -> str:
    """A tenant id unique to the test, so runs never see each other's tables."""
    return f"it-{uuid.uuid4().hex[:12]}"


@pytest_asyncio.fixture
async def service(
    engine: AsyncEngine, tenant_id: str
) -> AsyncGenerator[SchemaProvisioningService, None]:
    """Provide a provisioning service and drop the tenant's tables afterwards."""
    service = SchemaProvisioningService(
        repository=TenantSchemaRepository(engine),
        ddl_builder=DdlBuilder(),
    )
    yield service
    await service.drop_project_tables(tenant_id)
