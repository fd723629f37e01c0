"""Dependency injection for Provisioning bounded context.

Composes infrastructure resources (shared engine) with provisioning-specific
components (repository, DDL builder, service). The namespace registry and
tenant locks are process-wide so every request sees the same claims.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.dependencies import get_write_engine
from infrastructure.settings import get_settings
from provisioning.application.observability import (
    DefaultProvisioningServiceProbe,
    ProvisioningServiceProbe,
)
from provisioning.application.services import SchemaProvisioningService
from provisioning.application.tenant_coordination import (
    NamespaceRegistry,
    TenantLocks,
)
from provisioning.domain.observability import DefaultSchemaDefinitionProbe
from provisioning.infrastructure.ddl import DdlBuilder
from provisioning.infrastructure.tenant_schema_repository import (
    TenantSchemaRepository,
)


@lru_cache
def get_namespace_registry() -> NamespaceRegistry:
    """Get the process-wide namespace registry."""
    return NamespaceRegistry()


@lru_cache
def get_tenant_locks() -> TenantLocks:
    """Get the process-wide per-tenant locks."""
    return TenantLocks()


def get_provisioning_service_probe() -> ProvisioningServiceProbe:
    """Get ProvisioningServiceProbe instance.

    Returns:
        DefaultProvisioningServiceProbe instance for observability
    """
    return DefaultProvisioningServiceProbe()


def get_tenant_schema_repository(
    engine: Annotated[AsyncEngine, Depends(get_write_engine)],
) -> TenantSchemaRepository:
    """Get repository bound to the shared database.

    Args:
        engine: Application-scoped shared engine

    Returns:
        TenantSchemaRepository instance
    """
    return TenantSchemaRepository(engine)


def get_schema_provisioning_service(
    repository: Annotated[TenantSchemaRepository, Depends(get_tenant_schema_repository)],
    probe: Annotated[ProvisioningServiceProbe, Depends(get_provisioning_service_probe)],
) -> SchemaProvisioningService:
    """Get SchemaProvisioningService for shared-schema tenants.

    Args:
        repository: Repository bound to the shared database
        probe: Provisioning service probe for observability

    Returns:
        SchemaProvisioningService instance
    """
    return SchemaProvisioningService(
        repository=repository,
        ddl_builder=DdlBuilder(probe=DefaultSchemaDefinitionProbe()),
        probe=probe,
        namespace_prefix=get_settings().namespace_prefix,
        namespace_registry=get_namespace_registry(),
        tenant_locks=get_tenant_locks(),
    )
