"""Statement builder interface (port) for the Provisioning bounded context."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from provisioning.domain.value_objects import (
    ForeignKeyStatement,
    TableDefinition,
    TenantNamespace,
)


@runtime_checkable
class IDdlBuilder(Protocol):
    """Turns table definitions into tenant-namespaced DDL."""

    def build_create_table(
        self, namespace: TenantNamespace, table: TableDefinition
    ) -> str:
        """Idempotent CREATE TABLE statement for one table.

        Raises:
            DuplicateColumnError: If two columns sanitize to the same name
        """
        ...

    def build_foreign_keys(
        self, namespace: TenantNamespace, table: TableDefinition
    ) -> list[ForeignKeyStatement]:
        """One idempotent statement per referencing column.

        Raises:
            InvalidReferenceError: If a reference is not 'table.column'
        """
        ...
