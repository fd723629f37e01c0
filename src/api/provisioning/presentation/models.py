"""Pydantic models for provisioning API requests and responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from provisioning.domain.value_objects import ModuleDefinition, TableRow


class ProvisionRequest(BaseModel):
    """Request model for provisioning a project database."""

    modules: list[ModuleDefinition] = Field(
        default_factory=list,
        description="Modules whose tables should exist for the project",
    )


class TableListResponse(BaseModel):
    """Response model listing the physical tables of a project."""

    tables: list[str] = Field(..., description="Physical table names, ordered")


class TableDataResponse(BaseModel):
    """Response model for a sample of table rows."""

    columns: list[str] = Field(default_factory=list)
    rows: list[TableRow] = Field(default_factory=list)


class InsertRowsRequest(BaseModel):
    """Request model for inserting sample rows.

    Rows are kept loosely typed; a row that is not an object is counted as
    failed rather than rejecting the whole request.
    """

    rows: list[Any] = Field(default_factory=list, description="Rows to insert")


class InsertRowsResponse(BaseModel):
    """Response model for a sample-row insert."""

    success: bool
    inserted: int
