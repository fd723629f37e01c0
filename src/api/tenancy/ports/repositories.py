"""Ports for the Tenancy bounded context.

IBranchProvider talks to the managed branching service; IBranchDatabase
executes against a branch once it exists. Both follow the soft-failure
contract except IBranchDatabase.execute.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tenancy.domain.value_objects import (
    BranchInfo,
    BranchTableSummary,
    QueryResult,
    TenantBranch,
)


@runtime_checkable
class IBranchProvider(Protocol):
    """Allocates and releases database branches for tenants."""

    @property
    def is_configured(self) -> bool:
        """True when the branching service can be used at all."""
        ...

    async def create_branch(self, tenant_id: str, display_name: str) -> TenantBranch | None:
        """Create a branch for a tenant, or None on any failure."""
        ...

    async def delete_branch(self, branch_id: str) -> bool:
        """Delete a branch; False on any failure."""
        ...

    async def list_branches(self) -> list[BranchInfo]:
        """List branches of the parent project; [] on any failure."""
        ...

    async def get_endpoint_hosts(self, branch_id: str) -> list[str]:
        """Hosts of the branch's compute endpoints; [] on any failure."""
        ...


@runtime_checkable
class IBranchDatabase(Protocol):
    """Executes statements on tenant branches through pooled connections."""

    async def execute(self, connection_string: str, query: str) -> QueryResult:
        """Execute one statement.

        Raises:
            BranchQueryError: If the statement or the connection fails
        """
        ...

    async def list_tables(self, connection_string: str) -> list[BranchTableSummary]:
        """Public tables with columns and row counts; [] on any failure."""
        ...

    async def release(self, endpoint_host: str) -> int:
        """Dispose pooled connections to a host; returns pools released."""
        ...
