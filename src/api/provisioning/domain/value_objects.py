"""Domain value objects for the Provisioning bounded context.

Table and module definitions are produced by the generation layer (usually
as camelCase JSON) and are immutable once parsed. Results are plain data
returned to callers; nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from provisioning.domain.identifiers import sanitize_identifier, shorten_identifier

# Leaves room for a table name; a UUID tenant id fits even after the col_ rewrite
MAX_NAMESPACE_LENGTH = 44

# Rows read from tenant tables are arbitrary column -> value mappings
TableRow: TypeAlias = dict[str, Any]


class ColumnDefinition(BaseModel):
    """Abstract description of one column.

    Attributes:
        name: Raw column name (sanitized at DDL time)
        type: Raw logical type, e.g. "varchar(120)" or "serial"
        primary_key: Column is (part of) the primary key; several flagged
            columns form one composite key
        references: Optional foreign-key target as "table.column"
        not_null: Column must not be NULL
        default: Optional raw DEFAULT expression; JSON numbers and booleans
            become their SQL literal text
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    type: str = "text"
    primary_key: bool = Field(default=False, alias="primaryKey")
    references: str | None = None
    not_null: bool = Field(default=False, alias="notNull")
    default: str | None = None

    @field_validator("default", mode="before")
    @classmethod
    def _literal_default_as_text(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, int | float):
            return str(value)
        return value


class TableDefinition(BaseModel):
    """Abstract description of one table: a name and ordered columns."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    columns: tuple[ColumnDefinition, ...] = ()

    @field_validator("columns", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value


class ModuleDefinition(BaseModel):
    """Grouping of tables provisioned together. Carries no invariants."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    tables: tuple[TableDefinition, ...] = ()

    @field_validator("tables", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value


@dataclass(frozen=True)
class ForeignKeyStatement:
    """One idempotent ADD CONSTRAINT statement.

    Attributes:
        table_name: Logical name of the referencing table
        constraint_name: Deterministic constraint name
        sql: Statement that ignores an already existing constraint
    """

    table_name: str
    constraint_name: str
    sql: str


@dataclass(frozen=True)
class TenantNamespace:
    """Deterministic table-name prefix for one tenant.

    Derived as "<prefix>_<sanitized tenant id>", shortened with a digest
    suffix past MAX_NAMESPACE_LENGTH characters; every physical table of the
    tenant in the shared database starts with this value followed by "_".
    """

    tenant_id: str
    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def for_tenant(cls, tenant_id: str, prefix: str = "app") -> TenantNamespace:
        """Derive the namespace for a raw tenant identifier."""
        value = f"{sanitize_identifier(prefix)}_{sanitize_identifier(tenant_id)}"
        value = shorten_identifier(value, MAX_NAMESPACE_LENGTH)
        return cls(tenant_id=tenant_id, value=value)

    @property
    def table_prefix(self) -> str:
        """Prefix shared by every physical table name in this namespace."""
        return f"{self.value}_"

    def physical_table_name(self, table_name: str) -> str:
        """Physical name for a logical table name.

        PostgreSQL truncates identifiers past 63 characters silently, so
        longer names are shortened here, the same way for DDL, foreign-key
        targets and catalog lookups.
        """
        return shorten_identifier(f"{self.value}_{sanitize_identifier(table_name)}")

    def owns(self, physical_name: str) -> bool:
        return physical_name.startswith(self.table_prefix)


class ProvisioningResult(BaseModel):
    """Outcome of one provisioning call.

    Attributes:
        success: True when no table or constraint failed
        tables: Logical names of tables created (or already present)
        errors: One message per failed table or foreign key
    """

    success: bool
    tables: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class ColumnInfo(BaseModel):
    """Column name and catalog data type of a provisioned table."""

    name: str
    type: str


class TableSchema(BaseModel):
    """Physical table with its catalog columns."""

    table_name: str
    columns: list[ColumnInfo] = Field(default_factory=list)


class TableData(BaseModel):
    """Sample of rows read from a tenant table."""

    columns: list[str] = Field(default_factory=list)
    rows: list[TableRow] = Field(default_factory=list)


class InsertResult(BaseModel):
    """Outcome of inserting sample rows; success only if every row landed."""

    success: bool
    inserted: int
    requested: int


class DropResult(BaseModel):
    """Outcome of tenant teardown."""

    success: bool
    dropped: list[str] = Field(default_factory=list)
