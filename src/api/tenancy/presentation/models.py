"""Pydantic models for tenant branch API requests and responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from tenancy.domain.value_objects import (
    BranchInfo,
    BranchTableSummary,
    TenantBranch,
)


class CreateBranchRequest(BaseModel):
    """Request model for creating a tenant branch."""

    tenant_id: str = Field(..., description="Raw tenant (project) id", min_length=1)
    display_name: str = Field(default="", description="Human-readable name")


class TenantBranchResponse(BaseModel):
    """Response model for a created tenant branch."""

    branch_id: str
    branch_name: str
    endpoint_host: str
    connection_string: str
    created_at: str

    @classmethod
    def from_domain(cls, branch: TenantBranch) -> TenantBranchResponse:
        return cls(
            branch_id=branch.branch_id,
            branch_name=branch.branch_name,
            endpoint_host=branch.endpoint_host,
            connection_string=branch.connection_string,
            created_at=branch.created_at,
        )


class BranchResponse(BaseModel):
    """Response model for one listed branch."""

    id: str
    name: str
    created_at: str | None = None
    current_state: str | None = None
    parent_id: str | None = None

    @classmethod
    def from_domain(cls, branch: BranchInfo) -> BranchResponse:
        return cls(
            id=branch.branch_id,
            name=branch.name,
            created_at=branch.created_at,
            current_state=branch.current_state,
            parent_id=branch.parent_id,
        )


class BranchListResponse(BaseModel):
    """Response model for branch listing."""

    branches: list[BranchResponse] = Field(default_factory=list)
    configured: bool = Field(..., description="Whether branching is enabled")


class DeleteBranchResponse(BaseModel):
    deleted: bool


class BranchQueryRequest(BaseModel):
    """Request model for running one statement on a tenant branch."""

    connection_string: str = Field(..., min_length=1)
    query: str = Field(..., min_length=1)


class BranchQueryResponse(BaseModel):
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int


class BranchTablesRequest(BaseModel):
    connection_string: str = Field(..., min_length=1)


class BranchTableResponse(BaseModel):
    """Response model for one table on a tenant branch."""

    name: str
    columns: list[str]
    row_count: int

    @classmethod
    def from_domain(cls, summary: BranchTableSummary) -> BranchTableResponse:
        return cls(
            name=summary.name,
            columns=list(summary.columns),
            row_count=summary.row_count,
        )
