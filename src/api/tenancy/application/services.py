"""Application service for tenant isolation on database branches."""

from __future__ import annotations

from tenancy.domain.value_objects import (
    BranchInfo,
    BranchTableSummary,
    QueryResult,
    TenantBranch,
)
from tenancy.ports.repositories import IBranchDatabase, IBranchProvider


class TenantIsolationService:
    """Allocates, inspects and releases per-tenant database branches.

    Branch management never raises: a None, False or empty result tells the
    caller to keep the tenant in the shared database. Only
    `execute_on_branch` propagates failures (as BranchQueryError), because
    it runs caller-supplied SQL.
    """

    def __init__(self, provider: IBranchProvider, database: IBranchDatabase):
        self._provider = provider
        self._database = database

    def is_branching_configured(self) -> bool:
        return self._provider.is_configured

    async def create_tenant_branch(
        self, tenant_id: str, display_name: str
    ) -> TenantBranch | None:
        """Create an isolated branch for a tenant, or None to fall back."""
        return await self._provider.create_branch(tenant_id, display_name)

    async def delete_tenant_branch(self, branch_id: str) -> bool:
        """Delete a branch and dispose the pools that pointed at it.

        Endpoint hosts are looked up before deletion, since the branching
        service forgets them afterwards.
        """
        hosts = await self._provider.get_endpoint_hosts(branch_id)
        deleted = await self._provider.delete_branch(branch_id)
        if deleted:
            for host in hosts:
                await self._database.release(host)
        return deleted

    async def list_tenant_branches(self) -> list[BranchInfo]:
        return await self._provider.list_branches()

    async def execute_on_branch(self, connection_string: str, query: str) -> QueryResult:
        """Run one statement on a tenant branch.

        Raises:
            BranchQueryError: If the statement fails
        """
        return await self._database.execute(connection_string, query)

    async def get_branch_tables(
        self, connection_string: str
    ) -> list[BranchTableSummary]:
        return await self._database.list_tables(connection_string)
