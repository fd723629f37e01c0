"""Dependency injection for Tenancy bounded context.

Composes the branch pool registry and branching settings with the tenancy
components (API client, branch database, service).
"""

from typing import Annotated

from fastapi import Depends

from infrastructure.database.connection_pool import BranchPoolRegistry
from infrastructure.dependencies import get_branch_pool_registry
from infrastructure.settings import get_branching_settings
from tenancy.application.services import TenantIsolationService
from tenancy.infrastructure.branch_database import BranchDatabase
from tenancy.infrastructure.neon_client import NeonBranchClient


def get_branch_client() -> NeonBranchClient:
    """Get branching API client configured from settings.

    Returns:
        NeonBranchClient instance
    """
    return NeonBranchClient(get_branching_settings())


def get_branch_database(
    registry: Annotated[BranchPoolRegistry, Depends(get_branch_pool_registry)],
) -> BranchDatabase:
    """Get branch database bound to the application-scoped pool registry.

    Args:
        registry: Branch pool registry (singleton)

    Returns:
        BranchDatabase instance
    """
    return BranchDatabase(registry)


def get_tenant_isolation_service(
    client: Annotated[NeonBranchClient, Depends(get_branch_client)],
    database: Annotated[BranchDatabase, Depends(get_branch_database)],
) -> TenantIsolationService:
    """Get TenantIsolationService instance.

    Args:
        client: Branching API client
        database: Branch database adapter

    Returns:
        TenantIsolationService instance
    """
    return TenantIsolationService(provider=client, database=database)
