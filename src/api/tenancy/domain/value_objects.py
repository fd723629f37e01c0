"""Domain value objects for the Tenancy bounded context.

A tenant either lives in the shared database under a name prefix, or owns a
dedicated branch of the backing database. These objects describe branches
and what is read back from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TenantBranch:
    """An isolated database branch allocated to one tenant.

    Attributes:
        branch_id: Identifier assigned by the branching service
        branch_name: Deterministic name derived from the tenant id
        endpoint_host: Host of the branch's read-write endpoint
        connection_string: Ready-to-use connection string (TLS required)
        created_at: Creation timestamp as reported by the branching service
    """

    branch_id: str
    branch_name: str
    endpoint_host: str
    connection_string: str
    created_at: str

    def __repr__(self) -> str:
        # Connection string carries the role password
        return (
            f"TenantBranch(branch_id={self.branch_id!r}, "
            f"branch_name={self.branch_name!r}, "
            f"endpoint_host={self.endpoint_host!r})"
        )


@dataclass(frozen=True)
class BranchInfo:
    """A branch as listed by the branching service."""

    branch_id: str
    name: str
    created_at: str | None = None
    current_state: str | None = None
    parent_id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> BranchInfo:
        """Build from one entry of the service's branch listing.

        Raises:
            ValueError: If the entry has no id
        """
        branch_id = payload.get("id")
        if not branch_id:
            raise ValueError("branch entry without id")
        return cls(
            branch_id=str(branch_id),
            name=str(payload.get("name", "")),
            created_at=payload.get("created_at"),
            current_state=payload.get("current_state"),
            parent_id=payload.get("parent_id"),
        )


@dataclass(frozen=True)
class BranchTableSummary:
    """A public table on a branch with its columns and row count."""

    name: str
    columns: list[str] = field(default_factory=list)
    row_count: int = 0


@dataclass(frozen=True)
class QueryResult:
    """Rows returned by a statement executed on a branch.

    `row_count` is the driver's affected-row count when it reports one,
    otherwise the number of rows returned.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
