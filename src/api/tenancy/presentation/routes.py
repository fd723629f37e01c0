"""HTTP routes for tenant database branches."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from tenancy.application.services import TenantIsolationService
from tenancy.dependencies import get_tenant_isolation_service
from tenancy.ports.exceptions import BranchQueryError
from tenancy.presentation.models import (
    BranchListResponse,
    BranchQueryRequest,
    BranchQueryResponse,
    BranchResponse,
    BranchTableResponse,
    BranchTablesRequest,
    CreateBranchRequest,
    DeleteBranchResponse,
    TenantBranchResponse,
)

router = APIRouter(
    prefix="/branches",
    tags=["branches"],
)

ServiceDep = Annotated[TenantIsolationService, Depends(get_tenant_isolation_service)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={
        503: {"description": "Branching not configured or branch creation failed"},
    },
)
async def create_branch(
    request: CreateBranchRequest,
    service: ServiceDep,
) -> TenantBranchResponse:
    """Create an isolated database branch for a tenant.

    A 503 tells the caller to keep the tenant in the shared database.

    Raises:
        HTTPException: 503 if branching is disabled or creation failed
    """
    if not service.is_branching_configured():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database branching is not configured",
        )

    branch = await service.create_tenant_branch(request.tenant_id, request.display_name)
    if branch is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to create tenant branch",
        )
    return TenantBranchResponse.from_domain(branch)


@router.get("")
async def list_branches(service: ServiceDep) -> BranchListResponse:
    """List branches of the parent project (empty when not configured)."""
    branches = await service.list_tenant_branches()
    return BranchListResponse(
        branches=[BranchResponse.from_domain(b) for b in branches],
        configured=service.is_branching_configured(),
    )


@router.delete("/{branch_id}")
async def delete_branch(branch_id: str, service: ServiceDep) -> DeleteBranchResponse:
    """Delete a tenant branch and release its pooled connections."""
    return DeleteBranchResponse(deleted=await service.delete_tenant_branch(branch_id))


@router.post("/query")
async def execute_on_branch(
    request: BranchQueryRequest,
    service: ServiceDep,
) -> BranchQueryResponse:
    """Run one statement on a tenant branch.

    Raises:
        HTTPException: 400 with the database message if the statement fails
    """
    try:
        result = await service.execute_on_branch(
            request.connection_string, request.query
        )
    except BranchQueryError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return BranchQueryResponse(rows=result.rows, row_count=result.row_count)


@router.post("/tables")
async def get_branch_tables(
    request: BranchTablesRequest,
    service: ServiceDep,
) -> list[BranchTableResponse]:
    """List public tables on a branch with columns and row counts."""
    tables = await service.get_branch_tables(request.connection_string)
    return [BranchTableResponse.from_domain(t) for t in tables]
