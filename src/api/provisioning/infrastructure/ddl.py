"""DDL synthesis for tenant tables.

Builds CREATE TABLE and foreign-key statements from abstract table
definitions. Every identifier passes through the sanitizer and every type
through the type mapper, so the only generated input that can reach SQL is a
DEFAULT expression that matched the allowed grammar.
"""

from __future__ import annotations

from provisioning.domain.column_types import auto_increment_type, map_column_type
from provisioning.domain.default_expressions import normalize_default_expression
from provisioning.domain.exceptions import DuplicateColumnError, InvalidReferenceError
from provisioning.domain.identifiers import (
    quote_identifier,
    sanitize_identifier,
    shorten_identifier,
)
from provisioning.domain.observability import (
    DefaultSchemaDefinitionProbe,
    SchemaDefinitionProbe,
)
from provisioning.domain.value_objects import (
    ColumnDefinition,
    ForeignKeyStatement,
    TableDefinition,
    TenantNamespace,
)
from provisioning.ports.ddl import IDdlBuilder


class DdlBuilder(IDdlBuilder):
    """Builds tenant-namespaced DDL.

    Example:
        builder = DdlBuilder()
        namespace = TenantNamespace.for_tenant("proj-42")
        sql = builder.build_create_table(namespace, table)
        fks = builder.build_foreign_keys(namespace, table)
    """

    def __init__(self, probe: SchemaDefinitionProbe | None = None):
        self._probe = probe or DefaultSchemaDefinitionProbe()

    def _sanitize(self, raw: str) -> str:
        return sanitize_identifier(raw, probe=self._probe)

    def _column_sql(self, column: ColumnDefinition, inline_primary_key: bool) -> str:
        name = quote_identifier(self._sanitize(column.name))
        serial_type = auto_increment_type(column.type)

        if column.primary_key and serial_type is not None:
            definition = f"{name} {serial_type}"
        else:
            definition = f"{name} {map_column_type(column.type, probe=self._probe)}"
        if column.primary_key and inline_primary_key:
            definition += " PRIMARY KEY"

        # PRIMARY KEY already implies NOT NULL
        if column.not_null and not column.primary_key:
            definition += " NOT NULL"

        if column.default is not None:
            default = normalize_default_expression(column.default)
            if default is None:
                self._probe.default_expression_rejected(
                    column=column.name, expression=column.default
                )
            else:
                definition += f" DEFAULT {default}"

        return definition

    def _check_unique_columns(self, table: TableDefinition) -> None:
        seen: set[str] = set()
        for column in table.columns:
            name = self._sanitize(column.name)
            if name in seen:
                raise DuplicateColumnError(table=table.name, column=name)
            seen.add(name)

    def build_create_table(
        self, namespace: TenantNamespace, table: TableDefinition
    ) -> str:
        """Build an idempotent CREATE TABLE statement.

        A single primary-key column carries the constraint inline; several
        become one table-level composite PRIMARY KEY.

        Raises:
            DuplicateColumnError: If two columns sanitize to the same name
        """
        self._check_unique_columns(table)
        table_name = quote_identifier(namespace.physical_table_name(table.name))
        key_columns = [col for col in table.columns if col.primary_key]
        composite = len(key_columns) > 1

        definitions = [
            self._column_sql(col, inline_primary_key=not composite)
            for col in table.columns
        ]
        if composite:
            keys = ", ".join(
                quote_identifier(self._sanitize(col.name)) for col in key_columns
            )
            definitions.append(f"PRIMARY KEY ({keys})")

        column_defs = ",\n  ".join(definitions)
        return f"CREATE TABLE IF NOT EXISTS {table_name} (\n  {column_defs}\n);"

    def constraint_name(self, table: TableDefinition, column: ColumnDefinition) -> str:
        """Deterministic foreign-key constraint name."""
        name = f"fk_{self._sanitize(table.name)}_{self._sanitize(column.name)}"
        return shorten_identifier(name)

    def build_foreign_keys(
        self, namespace: TenantNamespace, table: TableDefinition
    ) -> list[ForeignKeyStatement]:
        """Build one statement per column carrying a 'table.column' reference.

        The referenced table is resolved in the same tenant namespace. Each
        statement swallows the duplicate_object condition so re-running it
        is a no-op.

        Raises:
            InvalidReferenceError: If a reference has no '.' separator
        """
        table_name = quote_identifier(namespace.physical_table_name(table.name))
        statements: list[ForeignKeyStatement] = []

        for column in table.columns:
            if not column.references:
                continue
            ref_table, sep, ref_column = column.references.partition(".")
            if not sep or not ref_table or not ref_column:
                raise InvalidReferenceError(
                    table=table.name, column=column.name, reference=column.references
                )

            constraint = self.constraint_name(table, column)
            sql = (
                "DO $$ BEGIN\n"
                f"  ALTER TABLE {table_name}\n"
                f"  ADD CONSTRAINT {quote_identifier(constraint)}\n"
                f"  FOREIGN KEY ({quote_identifier(self._sanitize(column.name))})\n"
                f"  REFERENCES {quote_identifier(namespace.physical_table_name(ref_table))}"
                f"({quote_identifier(self._sanitize(ref_column))});\n"
                "EXCEPTION\n"
                "  WHEN duplicate_object THEN NULL;\n"
                "END $$;"
            )
            statements.append(
                ForeignKeyStatement(
                    table_name=table.name, constraint_name=constraint, sql=sql
                )
            )

        return statements
