"""HTTP routes for project database provisioning and maintenance.

All routes address a project by its raw tenant id; the service derives the
namespace. Expected database failures come back as result data, so the only
error mapped here is a namespace collision (409).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from provisioning.application.services import (
    DEFAULT_SAMPLE_LIMIT,
    SchemaProvisioningService,
)
from provisioning.dependencies import get_schema_provisioning_service
from provisioning.domain.exceptions import TenantNamespaceCollisionError
from provisioning.domain.value_objects import (
    DropResult,
    ProvisioningResult,
    TableSchema,
)
from provisioning.presentation.models import (
    InsertRowsRequest,
    InsertRowsResponse,
    ProvisionRequest,
    TableDataResponse,
    TableListResponse,
)

router = APIRouter(
    prefix="/projects/{tenant_id}/database",
    tags=["provisioning"],
)

ServiceDep = Annotated[
    SchemaProvisioningService, Depends(get_schema_provisioning_service)
]


def _collision(error: TenantNamespaceCollisionError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=str(error),
    )


@router.post("")
async def provision_project_database(
    tenant_id: str,
    request: ProvisionRequest,
    service: ServiceDep,
) -> ProvisioningResult:
    """Create the tables of every module for a project.

    Partial success is a normal outcome: the response lists the tables that
    exist and one error per failed table or foreign key.

    Raises:
        HTTPException: 409 if the tenant id collides with another tenant's
            namespace
    """
    try:
        return await service.provision(tenant_id, request.modules)
    except TenantNamespaceCollisionError as e:
        raise _collision(e) from e


@router.get("/tables")
async def list_project_tables(
    tenant_id: str,
    service: ServiceDep,
) -> TableListResponse:
    """List the physical tables of a project."""
    try:
        tables = await service.get_project_tables(tenant_id)
    except TenantNamespaceCollisionError as e:
        raise _collision(e) from e
    return TableListResponse(tables=tables)


@router.get("/schema")
async def get_project_schema(
    tenant_id: str,
    service: ServiceDep,
) -> list[TableSchema]:
    """List the project's tables with column names and catalog types."""
    try:
        return await service.get_project_tables_with_columns(tenant_id)
    except TenantNamespaceCollisionError as e:
        raise _collision(e) from e


@router.get("/tables/{table_name}")
async def get_table_data(
    tenant_id: str,
    table_name: str,
    service: ServiceDep,
    limit: int = Query(default=DEFAULT_SAMPLE_LIMIT),
) -> TableDataResponse:
    """Read a sample of rows from a project table.

    The limit is clamped to [1, 1000]. A missing table yields empty columns
    and rows rather than 404.
    """
    try:
        data = await service.get_table_data(tenant_id, table_name, limit=limit)
    except TenantNamespaceCollisionError as e:
        raise _collision(e) from e
    return TableDataResponse(columns=data.columns, rows=data.rows)


@router.post("/tables/{table_name}/rows")
async def insert_sample_rows(
    tenant_id: str,
    table_name: str,
    request: InsertRowsRequest,
    service: ServiceDep,
) -> InsertRowsResponse:
    """Insert sample rows into a project table, skipping rows that fail."""
    try:
        result = await service.insert_sample_data(tenant_id, table_name, request.rows)
    except TenantNamespaceCollisionError as e:
        raise _collision(e) from e
    return InsertRowsResponse(success=result.success, inserted=result.inserted)


@router.delete("")
async def drop_project_tables(
    tenant_id: str,
    service: ServiceDep,
) -> DropResult:
    """Drop every table of a project. Not reversible."""
    try:
        return await service.drop_project_tables(tenant_id)
    except TenantNamespaceCollisionError as e:
        raise _collision(e) from e
