"""Unit tests for SchemaProvisioningService."""

from unittest.mock import call, create_autospec

import pytest

from infrastructure.database.exceptions import StatementExecutionError
from provisioning.application.observability import ProvisioningServiceProbe
from provisioning.application.services import SchemaProvisioningService
from provisioning.application.tenant_coordination import NamespaceRegistry
from provisioning.domain.exceptions import TenantNamespaceCollisionError
from provisioning.domain.value_objects import (
    ColumnDefinition,
    ModuleDefinition,
    TableDefinition,
    TableSchema,
    ColumnInfo,
)
from provisioning.infrastructure.ddl import DdlBuilder
from provisioning.ports.repositories import ITenantSchemaRepository

TENANT = "proj-42"


@pytest.fixture
def mock_repository():
    """Create a mock repository."""
    return create_autospec(ITenantSchemaRepository, instance=True)


@pytest.fixture
def mock_probe():
    """Create a mock probe."""
    return create_autospec(ProvisioningServiceProbe, instance=True)


@pytest.fixture
def registry():
    return NamespaceRegistry()


@pytest.fixture
def service(mock_repository, mock_probe, registry):
    """Create a service with mock dependencies."""
    return SchemaProvisioningService(
        repository=mock_repository,
        ddl_builder=DdlBuilder(),
        probe=mock_probe,
        namespace_registry=registry,
    )


def _table(name: str, *columns: ColumnDefinition) -> TableDefinition:
    return TableDefinition(
        name=name,
        columns=columns or (ColumnDefinition(name="id", type="serial", primary_key=True),),
    )


def _executed(mock_repository) -> list[str]:
    return [c.args[0] for c in mock_repository.execute_ddl.await_args_list]


def _fail_when(fragment: str):
    async def side_effect(statement: str) -> None:
        if fragment in statement:
            raise StatementExecutionError("relation error", statement=statement)

    return side_effect


class TestProvision:
    """Tests for the two-pass provisioning algorithm."""

    @pytest.mark.asyncio
    async def test_creates_all_tables(self, service, mock_repository):
        modules = [
            ModuleDefinition(name="crm", tables=(_table("customers"), _table("notes"))),
            ModuleDefinition(name="sales", tables=(_table("orders"),)),
        ]

        result = await service.provision(TENANT, modules)

        assert result.success is True
        assert result.tables == ["customers", "notes", "orders"]
        assert result.errors == []
        executed = _executed(mock_repository)
        assert len(executed) == 3
        assert '"app_proj_42_customers"' in executed[0]
        assert '"app_proj_42_orders"' in executed[2]

    @pytest.mark.asyncio
    async def test_forward_reference_is_deferred(self, service, mock_repository):
        orders = _table(
            "orders",
            ColumnDefinition(name="id", type="serial", primary_key=True),
            ColumnDefinition(name="customer_id", type="int", references="customers.id"),
        )
        customers = _table("customers")

        result = await service.provision(
            TENANT, [ModuleDefinition(name="m", tables=(orders, customers))]
        )

        assert result.success is True
        executed = _executed(mock_repository)
        assert executed[0].startswith('CREATE TABLE IF NOT EXISTS "app_proj_42_orders"')
        assert executed[1].startswith('CREATE TABLE IF NOT EXISTS "app_proj_42_customers"')
        assert executed[2].startswith("DO $$")
        assert 'REFERENCES "app_proj_42_customers"("id")' in executed[2]

    @pytest.mark.asyncio
    async def test_reprovisioning_is_idempotent(self, service, mock_repository):
        modules = [
            ModuleDefinition(
                name="m",
                tables=(
                    _table("customers"),
                    _table(
                        "orders",
                        ColumnDefinition(name="customer_id", references="customers.id"),
                    ),
                ),
            )
        ]

        first = await service.provision(TENANT, modules)
        statements_first = _executed(mock_repository)
        mock_repository.execute_ddl.reset_mock()
        second = await service.provision(TENANT, modules)

        assert second == first
        assert second.errors == []
        assert _executed(mock_repository) == statements_first

    @pytest.mark.asyncio
    async def test_unknown_type_is_not_an_error(self, service):
        tables = (
            _table("a"),
            _table("b", ColumnDefinition(name="shape", type="geometry")),
            _table("c"),
        )

        result = await service.provision(TENANT, [ModuleDefinition(name="m", tables=tables)])

        assert result.success is True
        assert result.tables == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_one_failed_table_does_not_block_siblings(
        self, service, mock_repository, mock_probe
    ):
        mock_repository.execute_ddl.side_effect = _fail_when('"app_proj_42_b"')
        tables = (_table("a"), _table("b"), _table("c"))

        result = await service.provision(TENANT, [ModuleDefinition(name="m", tables=tables)])

        assert result.success is False
        assert result.tables == ["a", "c"]
        assert result.errors == ["Failed to create table b: relation error"]
        mock_probe.table_creation_failed.assert_called_once_with(
            namespace="app_proj_42", table="b", error="relation error"
        )

    @pytest.mark.asyncio
    async def test_duplicate_columns_fail_table_without_sql(self, service, mock_repository):
        broken = _table(
            "people",
            ColumnDefinition(name="First Name"),
            ColumnDefinition(name="first_name"),
        )

        result = await service.provision(
            TENANT, [ModuleDefinition(name="m", tables=(broken, _table("other")))]
        )

        assert result.success is False
        assert result.tables == ["other"]
        assert result.errors[0].startswith("Failed to create table people:")
        assert len(_executed(mock_repository)) == 1

    @pytest.mark.asyncio
    async def test_foreign_key_failure_is_reported(self, service, mock_repository, mock_probe):
        mock_repository.execute_ddl.side_effect = _fail_when("fk_orders_customer_id")
        orders = _table(
            "orders",
            ColumnDefinition(name="customer_id", references="customers.id"),
        )

        result = await service.provision(TENANT, [ModuleDefinition(name="m", tables=(orders,))])

        assert result.success is False
        assert result.tables == ["orders"]
        assert result.errors == [
            "Failed to add foreign key fk_orders_customer_id: relation error"
        ]
        mock_probe.foreign_key_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_table_gets_no_foreign_keys(self, service, mock_repository):
        mock_repository.execute_ddl.side_effect = _fail_when("CREATE TABLE")
        orders = _table(
            "orders",
            ColumnDefinition(name="customer_id", references="customers.id"),
        )

        await service.provision(TENANT, [ModuleDefinition(name="m", tables=(orders,))])

        assert not any(s.startswith("DO $$") for s in _executed(mock_repository))

    @pytest.mark.asyncio
    async def test_invalid_reference_is_reported(self, service):
        orders = _table("orders", ColumnDefinition(name="customer_id", references="customers"))

        result = await service.provision(TENANT, [ModuleDefinition(name="m", tables=(orders,))])

        assert result.success is False
        assert result.tables == ["orders"]
        assert "invalid reference 'customers'" in result.errors[0]

    @pytest.mark.asyncio
    async def test_empty_batch_succeeds(self, service, mock_repository):
        result = await service.provision(TENANT, [])

        assert result.success is True
        assert result.tables == []
        mock_repository.execute_ddl.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_records_lifecycle(self, service, mock_probe):
        await service.provision(TENANT, [ModuleDefinition(name="m", tables=(_table("a"),))])

        mock_probe.provisioning_started.assert_called_once_with(
            namespace="app_proj_42", table_count=1
        )
        mock_probe.table_created.assert_called_once_with(namespace="app_proj_42", table="a")
        mock_probe.provisioning_completed.assert_called_once_with(
            namespace="app_proj_42", created=1, errors=0
        )


class TestNamespaceCollision:
    @pytest.mark.asyncio
    async def test_colliding_tenant_is_rejected_before_sql(
        self, service, mock_repository, mock_probe
    ):
        await service.provision("proj-42", [])

        with pytest.raises(TenantNamespaceCollisionError):
            await service.provision("proj_42", [ModuleDefinition(name="m", tables=(_table("a"),))])

        mock_repository.execute_ddl.assert_not_awaited()
        mock_probe.namespace_collision.assert_called_once_with(
            namespace="app_proj_42", tenant_id="proj_42", claimed_by="proj-42"
        )

    @pytest.mark.asyncio
    async def test_shared_registry_spans_service_instances(
        self, mock_repository, registry
    ):
        first = SchemaProvisioningService(
            mock_repository, DdlBuilder(), namespace_registry=registry
        )
        second = SchemaProvisioningService(
            mock_repository, DdlBuilder(), namespace_registry=registry
        )
        await first.get_project_tables("a-b")

        with pytest.raises(TenantNamespaceCollisionError):
            await second.get_project_tables("a_b")


class TestIntrospection:
    @pytest.mark.asyncio
    async def test_lists_tables(self, service, mock_repository):
        mock_repository.list_tables.return_value = ["app_proj_42_a", "app_proj_42_b"]

        tables = await service.get_project_tables(TENANT)

        assert tables == ["app_proj_42_a", "app_proj_42_b"]
        (namespace,) = mock_repository.list_tables.await_args.args
        assert namespace.value == "app_proj_42"

    @pytest.mark.asyncio
    async def test_listing_failure_yields_empty(self, service, mock_repository, mock_probe):
        mock_repository.list_tables.side_effect = StatementExecutionError("down")

        assert await service.get_project_tables(TENANT) == []
        mock_probe.table_listing_failed.assert_called_once_with(
            namespace="app_proj_42", error="down"
        )

    @pytest.mark.asyncio
    async def test_tables_with_columns(self, service, mock_repository):
        expected = [
            TableSchema(
                table_name="app_proj_42_a",
                columns=[ColumnInfo(name="id", type="integer")],
            )
        ]
        mock_repository.describe_tables.return_value = expected

        assert await service.get_project_tables_with_columns(TENANT) == expected

    @pytest.mark.asyncio
    async def test_tables_with_columns_failure_yields_empty(self, service, mock_repository):
        mock_repository.describe_tables.side_effect = StatementExecutionError("down")

        assert await service.get_project_tables_with_columns(TENANT) == []


class TestGetTableData:
    @pytest.mark.asyncio
    async def test_reads_columns_and_rows(self, service, mock_repository):
        mock_repository.get_column_names.return_value = ["id", "name"]
        mock_repository.fetch_rows.return_value = [{"id": 1, "name": "Ada"}]

        data = await service.get_table_data(TENANT, "Customers")

        assert data.columns == ["id", "name"]
        assert data.rows == [{"id": 1, "name": "Ada"}]
        mock_repository.fetch_rows.assert_awaited_once_with("app_proj_42_customers", 100)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("requested", "applied"), [(5000, 1000), (0, 1), (-3, 1), (7, 7)])
    async def test_limit_is_clamped(self, service, mock_repository, requested, applied):
        mock_repository.get_column_names.return_value = []
        mock_repository.fetch_rows.return_value = []

        await service.get_table_data(TENANT, "a", limit=requested)

        mock_repository.fetch_rows.assert_awaited_once_with("app_proj_42_a", applied)

    @pytest.mark.asyncio
    async def test_long_name_is_looked_up_as_created(self, service, mock_repository):
        tenant = "3f2b9c1e-8a4d-4c6e-9b1a-0d2e4f6a8c0b"
        table = _table("customer_order_line_items_history")
        mock_repository.get_column_names.return_value = ["id"]
        mock_repository.fetch_rows.return_value = [{"id": 1}]

        await service.provision(tenant, [ModuleDefinition(name="m", tables=(table,))])
        data = await service.get_table_data(tenant, table.name)

        (create_sql,) = _executed(mock_repository)
        physical = mock_repository.get_column_names.await_args.args[0]
        assert len(physical) <= 63
        assert f'"{physical}"' in create_sql
        mock_repository.fetch_rows.assert_awaited_once_with(physical, 100)
        assert data.columns == ["id"]

    @pytest.mark.asyncio
    async def test_failure_yields_empty_result(self, service, mock_repository, mock_probe):
        mock_repository.get_column_names.return_value = ["id"]
        mock_repository.fetch_rows.side_effect = StatementExecutionError("no such table")

        data = await service.get_table_data(TENANT, "missing")

        assert data.columns == []
        assert data.rows == []
        mock_probe.table_read_failed.assert_called_once()


class TestInsertSampleData:
    @pytest.mark.asyncio
    async def test_inserts_every_row(self, service, mock_repository):
        rows = [{"name": "a"}, {"name": "b"}]

        result = await service.insert_sample_data(TENANT, "customers", rows)

        assert result.success is True
        assert result.inserted == 2
        assert result.requested == 2
        mock_repository.insert_row.assert_has_awaits(
            [
                call("app_proj_42_customers", {"name": "a"}),
                call("app_proj_42_customers", {"name": "b"}),
            ]
        )

    @pytest.mark.asyncio
    async def test_malformed_row_is_skipped(self, service, mock_repository, mock_probe):
        rows = [{"n": 1}, {"n": 2}, "not a row", {"n": 4}, {"n": 5}]

        result = await service.insert_sample_data(TENANT, "t", rows)

        assert result.inserted == 4
        assert result.success is False
        assert mock_repository.insert_row.await_count == 4
        mock_probe.row_insert_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_database_failure_skips_row(self, service, mock_repository):
        mock_repository.insert_row.side_effect = [
            None,
            StatementExecutionError("invalid input syntax for type integer"),
            None,
        ]

        result = await service.insert_sample_data(TENANT, "t", [{"n": 1}, {"n": "x"}, {"n": 3}])

        assert result.inserted == 2
        assert result.success is False

    @pytest.mark.asyncio
    async def test_column_names_are_sanitized(self, service, mock_repository):
        await service.insert_sample_data(TENANT, "t", [{"First Name": "Ada", "select": 1}])

        mock_repository.insert_row.assert_awaited_once_with(
            "app_proj_42_t", {"first_name": "Ada", "col_select": 1}
        )

    @pytest.mark.asyncio
    async def test_colliding_column_names_fail_the_row(self, service, mock_repository):
        result = await service.insert_sample_data(
            TENANT, "t", [{"First Name": "Ada", "first-name": "Grace"}]
        )

        assert result.inserted == 0
        mock_repository.insert_row.assert_not_awaited()


class TestDropProjectTables:
    @pytest.mark.asyncio
    async def test_drops_every_table(self, service, mock_repository):
        mock_repository.list_tables.return_value = ["app_proj_42_a", "app_proj_42_b"]

        result = await service.drop_project_tables(TENANT)

        assert result.success is True
        assert result.dropped == ["app_proj_42_a", "app_proj_42_b"]
        mock_repository.drop_table.assert_has_awaits(
            [call("app_proj_42_a"), call("app_proj_42_b")]
        )

    @pytest.mark.asyncio
    async def test_partial_drop_is_not_success(self, service, mock_repository):
        mock_repository.list_tables.return_value = ["app_proj_42_a", "app_proj_42_b"]
        mock_repository.drop_table.side_effect = [StatementExecutionError("locked"), None]

        result = await service.drop_project_tables(TENANT)

        assert result.success is False
        assert result.dropped == ["app_proj_42_b"]

    @pytest.mark.asyncio
    async def test_listing_failure_is_not_success(self, service, mock_repository):
        mock_repository.list_tables.side_effect = StatementExecutionError("down")

        result = await service.drop_project_tables(TENANT)

        assert result.success is False
        assert result.dropped == []
        mock_repository.drop_table.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_successful_drop_releases_namespace(self, service, mock_repository, registry):
        mock_repository.list_tables.return_value = []

        await service.drop_project_tables("proj-42")

        assert registry.owner("app_proj_42") is None
        await service.get_project_tables("proj_42")
        assert registry.owner("app_proj_42") == "proj_42"
