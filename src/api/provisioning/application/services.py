"""Application service for tenant schema provisioning.

Orchestrates the DDL builder and the schema repository: two-pass
provisioning (tables, then foreign keys), best-effort introspection, sample
data loading and tenant teardown. Expected failures are absorbed here and
returned as data; nothing below this layer is allowed to escape except a
namespace collision, which means the request itself is invalid.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from infrastructure.database.exceptions import StatementExecutionError
from provisioning.application.observability import (
    DefaultProvisioningServiceProbe,
    ProvisioningServiceProbe,
)
from provisioning.application.tenant_coordination import (
    NamespaceRegistry,
    TenantLocks,
)
from provisioning.domain.exceptions import (
    InvalidReferenceError,
    ProvisioningError,
    TenantNamespaceCollisionError,
)
from provisioning.domain.identifiers import sanitize_identifier
from provisioning.domain.value_objects import (
    DropResult,
    ForeignKeyStatement,
    InsertResult,
    ModuleDefinition,
    ProvisioningResult,
    TableData,
    TableDefinition,
    TableSchema,
    TenantNamespace,
)
from provisioning.ports.ddl import IDdlBuilder
from provisioning.ports.repositories import ITenantSchemaRepository

DEFAULT_SAMPLE_LIMIT = 100
MAX_SAMPLE_LIMIT = 1000


class SchemaProvisioningService:
    """Provisions and maintains the physical tables of generated projects.

    All operations are sequential: statements run one at a time in input
    order. `provision` and `drop_project_tables` hold a per-tenant lock so
    concurrent calls for the same tenant are serialized.
    """

    def __init__(
        self,
        repository: ITenantSchemaRepository,
        ddl_builder: IDdlBuilder,
        probe: ProvisioningServiceProbe | None = None,
        namespace_prefix: str = "app",
        namespace_registry: NamespaceRegistry | None = None,
        tenant_locks: TenantLocks | None = None,
    ):
        """Initialize the service.

        Args:
            repository: Schema repository bound to the target database
            ddl_builder: Builder for tenant-namespaced DDL
            probe: Optional domain probe for observability
            namespace_prefix: Fixed prefix of every tenant namespace
            namespace_registry: Shared collision guard (process-wide)
            tenant_locks: Shared per-tenant locks (process-wide)
        """
        self._repository = repository
        self._ddl = ddl_builder
        self._probe = probe or DefaultProvisioningServiceProbe()
        self._namespace_prefix = namespace_prefix
        self._namespaces = namespace_registry or NamespaceRegistry()
        self._locks = tenant_locks or TenantLocks()

    def namespace_for(self, tenant_id: str) -> TenantNamespace:
        """Derive and claim the namespace of a tenant.

        Raises:
            TenantNamespaceCollisionError: If a different tenant id already
                maps to the same namespace
        """
        namespace = TenantNamespace.for_tenant(tenant_id, prefix=self._namespace_prefix)
        try:
            self._namespaces.claim(namespace)
        except TenantNamespaceCollisionError as e:
            self._probe.namespace_collision(
                namespace=e.namespace, tenant_id=e.tenant_id, claimed_by=e.claimed_by
            )
            raise
        return namespace

    async def provision(
        self, tenant_id: str, modules: Sequence[ModuleDefinition]
    ) -> ProvisioningResult:
        """Create every table of every module, then add all foreign keys.

        A table that fails to create is reported in `errors` and does not
        stop its siblings. Foreign keys are deferred until every create has
        been attempted so a table may reference one defined later in the
        batch. Re-running the same request is a no-op without errors.

        Args:
            tenant_id: Raw tenant (project) identifier
            modules: Modules whose tables should exist

        Returns:
            ProvisioningResult with created logical table names and errors
        """
        namespace = self.namespace_for(tenant_id)
        tables = [table for module in modules for table in module.tables]

        async with self._locks.hold(namespace):
            self._probe.provisioning_started(
                namespace=namespace.value, table_count=len(tables)
            )
            created: list[TableDefinition] = []
            errors: list[str] = []

            for table in tables:
                error = await self._create_table(namespace, table)
                if error is None:
                    created.append(table)
                else:
                    errors.append(error)

            for table in created:
                errors.extend(await self._add_foreign_keys(namespace, table))

            self._probe.provisioning_completed(
                namespace=namespace.value, created=len(created), errors=len(errors)
            )

        return ProvisioningResult(
            success=not errors,
            tables=[table.name for table in created],
            errors=errors,
        )

    async def _create_table(
        self, namespace: TenantNamespace, table: TableDefinition
    ) -> str | None:
        try:
            statement = self._ddl.build_create_table(namespace, table)
            await self._repository.execute_ddl(statement)
        except (ProvisioningError, StatementExecutionError) as e:
            self._probe.table_creation_failed(
                namespace=namespace.value, table=table.name, error=str(e)
            )
            return f"Failed to create table {table.name}: {e}"

        self._probe.table_created(namespace=namespace.value, table=table.name)
        return None

    async def _add_foreign_keys(
        self, namespace: TenantNamespace, table: TableDefinition
    ) -> list[str]:
        errors: list[str] = []
        try:
            statements: list[ForeignKeyStatement] = self._ddl.build_foreign_keys(
                namespace, table
            )
        except InvalidReferenceError as e:
            self._probe.foreign_key_failed(
                namespace=namespace.value, constraint=table.name, error=str(e)
            )
            return [f"Failed to add foreign key on table {table.name}: {e}"]

        for fk in statements:
            try:
                await self._repository.execute_ddl(fk.sql)
            except StatementExecutionError as e:
                self._probe.foreign_key_failed(
                    namespace=namespace.value,
                    constraint=fk.constraint_name,
                    error=str(e),
                )
                errors.append(f"Failed to add foreign key {fk.constraint_name}: {e}")
            else:
                self._probe.foreign_key_added(
                    namespace=namespace.value, constraint=fk.constraint_name
                )
        return errors

    async def get_project_tables(self, tenant_id: str) -> list[str]:
        """Physical table names of a tenant, ordered by name ([] on failure)."""
        namespace = self.namespace_for(tenant_id)
        try:
            tables = await self._repository.list_tables(namespace)
        except StatementExecutionError as e:
            self._probe.table_listing_failed(namespace=namespace.value, error=str(e))
            return []

        self._probe.tables_listed(namespace=namespace.value, count=len(tables))
        return tables

    async def get_project_tables_with_columns(self, tenant_id: str) -> list[TableSchema]:
        """Tenant tables with catalog column names and types ([] on failure)."""
        namespace = self.namespace_for(tenant_id)
        try:
            return await self._repository.describe_tables(namespace)
        except StatementExecutionError as e:
            self._probe.table_listing_failed(namespace=namespace.value, error=str(e))
            return []

    async def get_table_data(
        self, tenant_id: str, table_name: str, limit: int = DEFAULT_SAMPLE_LIMIT
    ) -> TableData:
        """Read up to `limit` rows of a tenant table.

        The read path is best-effort: any failure yields empty columns/rows.
        """
        namespace = self.namespace_for(tenant_id)
        physical = namespace.physical_table_name(table_name)
        limit = max(1, min(limit, MAX_SAMPLE_LIMIT))

        try:
            columns = await self._repository.get_column_names(physical)
            rows = await self._repository.fetch_rows(physical, limit)
        except StatementExecutionError as e:
            self._probe.table_read_failed(
                namespace=namespace.value, table=table_name, error=str(e)
            )
            return TableData()

        return TableData(columns=columns, rows=rows)

    async def insert_sample_data(
        self, tenant_id: str, table_name: str, rows: Sequence[Any]
    ) -> InsertResult:
        """Insert rows one by one; failing rows are logged and skipped."""
        namespace = self.namespace_for(tenant_id)
        physical = namespace.physical_table_name(table_name)
        inserted = 0

        for row in rows:
            try:
                values = self._sanitize_row(row)
                await self._repository.insert_row(physical, values)
            except (ValueError, StatementExecutionError) as e:
                self._probe.row_insert_failed(
                    namespace=namespace.value, table=table_name, error=str(e)
                )
                continue
            inserted += 1

        self._probe.rows_inserted(
            namespace=namespace.value,
            table=table_name,
            inserted=inserted,
            requested=len(rows),
        )
        return InsertResult(
            success=inserted == len(rows), inserted=inserted, requested=len(rows)
        )

    @staticmethod
    def _sanitize_row(row: Any) -> dict[str, Any]:
        if not isinstance(row, Mapping):
            raise ValueError(f"row must be an object, got {type(row).__name__}")

        values: dict[str, Any] = {}
        for key, value in row.items():
            column = sanitize_identifier(str(key))
            if column in values:
                raise ValueError(f"duplicate column '{column}' after sanitization")
            values[column] = value
        return values

    async def drop_project_tables(self, tenant_id: str) -> DropResult:
        """Drop every table of a tenant (CASCADE). Not reversible.

        Returns:
            DropResult with the tables actually dropped; success only if all
            listed tables were dropped and the listing itself succeeded
        """
        namespace = self.namespace_for(tenant_id)

        async with self._locks.hold(namespace):
            try:
                tables = await self._repository.list_tables(namespace)
            except StatementExecutionError as e:
                self._probe.table_listing_failed(namespace=namespace.value, error=str(e))
                return DropResult(success=False)

            dropped: list[str] = []
            for table in tables:
                try:
                    await self._repository.drop_table(table)
                except StatementExecutionError as e:
                    self._probe.table_drop_failed(
                        namespace=namespace.value, table=table, error=str(e)
                    )
                    continue
                dropped.append(table)
                self._probe.table_dropped(namespace=namespace.value, table=table)

        success = len(dropped) == len(tables)
        if success:
            self._namespaces.release(namespace)
        return DropResult(success=success, dropped=dropped)
