"""Repository interfaces (ports) for the Provisioning bounded context.

The application service drives tenant tables exclusively through this
protocol. Implementations raise StatementExecutionError for any database
failure; turning failures into result data is the service's job.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from provisioning.domain.value_objects import TableRow, TableSchema, TenantNamespace


@runtime_checkable
class ITenantSchemaRepository(Protocol):
    """Executes DDL and catalog queries against one physical database."""

    async def execute_ddl(self, statement: str) -> None:
        """Execute a single DDL statement in its own transaction."""
        ...

    async def list_tables(self, namespace: TenantNamespace) -> list[str]:
        """List physical table names owned by a namespace, ordered by name."""
        ...

    async def describe_tables(self, namespace: TenantNamespace) -> list[TableSchema]:
        """List a namespace's tables with their catalog columns."""
        ...

    async def get_column_names(self, physical_table: str) -> list[str]:
        """Catalog column names of a physical table in ordinal order."""
        ...

    async def fetch_rows(self, physical_table: str, limit: int) -> list[TableRow]:
        """Fetch up to `limit` rows from a physical table."""
        ...

    async def insert_row(self, physical_table: str, row: dict[str, Any]) -> None:
        """Insert one row keyed by sanitized column names."""
        ...

    async def drop_table(self, physical_table: str) -> None:
        """Drop a physical table and everything depending on it."""
        ...
