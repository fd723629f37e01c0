"""PostgreSQL implementation of ITenantSchemaRepository.

Works against any AsyncEngine: the shared database for name-prefixed
tenants, or a branch engine from the pool registry for isolated tenants.
Each statement runs in its own transaction; DDL is never batched.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.exceptions import StatementExecutionError
from provisioning.domain.identifiers import quote_identifier
from provisioning.domain.value_objects import (
    ColumnInfo,
    TableRow,
    TableSchema,
    TenantNamespace,
)
from provisioning.ports.repositories import ITenantSchemaRepository

# Escape character for LIKE patterns built from namespaces
_LIKE_ESCAPE = "!"

_LIST_TABLES_SQL = text(
    """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = 'public'
      AND table_name LIKE :pattern ESCAPE '!'
    ORDER BY table_name
    """
)

_DESCRIBE_TABLES_SQL = text(
    """
    SELECT c.table_name, c.column_name, c.data_type
    FROM information_schema.columns c
    JOIN information_schema.tables t
      ON t.table_schema = c.table_schema AND t.table_name = c.table_name
    WHERE c.table_schema = 'public'
      AND t.table_type = 'BASE TABLE'
      AND c.table_name LIKE :pattern ESCAPE '!'
    ORDER BY c.table_name, c.ordinal_position
    """
)

_COLUMN_NAMES_SQL = text(
    """
    SELECT column_name
    FROM information_schema.columns
    WHERE table_schema = 'public' AND table_name = :table_name
    ORDER BY ordinal_position
    """
)


def namespace_like_pattern(namespace: TenantNamespace) -> str:
    """LIKE pattern matching every table of a namespace.

    Underscores are LIKE wildcards, so the literal prefix is escaped.
    """
    escaped = (
        namespace.table_prefix.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
    return f"{escaped}%"


def _json_default(value: Any) -> str:
    return str(value)


class TenantSchemaRepository(ITenantSchemaRepository):
    """Repository executing tenant DDL and catalog queries.

    Database failures (including connection failures) are raised as
    StatementExecutionError carrying the underlying message.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize repository with the engine to execute on.

        Args:
            engine: Shared database engine or a tenant branch engine
        """
        self._engine = engine

    async def execute_ddl(self, statement: str) -> None:
        # Driver-level execution: DDL may contain ':' inside literals
        await self._execute_write(statement)

    async def list_tables(self, namespace: TenantNamespace) -> list[str]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    _LIST_TABLES_SQL,
                    {"pattern": namespace_like_pattern(namespace)},
                )
                return [row.table_name for row in result]
        except (SQLAlchemyError, OSError) as e:
            raise StatementExecutionError(_describe(e)) from e

    async def describe_tables(self, namespace: TenantNamespace) -> list[TableSchema]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    _DESCRIBE_TABLES_SQL,
                    {"pattern": namespace_like_pattern(namespace)},
                )
                rows = result.all()
        except (SQLAlchemyError, OSError) as e:
            raise StatementExecutionError(_describe(e)) from e

        schemas: dict[str, TableSchema] = {}
        for row in rows:
            schema = schemas.setdefault(
                row.table_name, TableSchema(table_name=row.table_name)
            )
            schema.columns.append(ColumnInfo(name=row.column_name, type=row.data_type))
        return list(schemas.values())

    async def get_column_names(self, physical_table: str) -> list[str]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    _COLUMN_NAMES_SQL, {"table_name": physical_table}
                )
                return [row.column_name for row in result]
        except (SQLAlchemyError, OSError) as e:
            raise StatementExecutionError(_describe(e)) from e

    async def fetch_rows(self, physical_table: str, limit: int) -> list[TableRow]:
        statement = text(f"SELECT * FROM {quote_identifier(physical_table)} LIMIT :limit")
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(statement, {"limit": limit})
                return [dict(row._mapping) for row in result]
        except (SQLAlchemyError, OSError) as e:
            raise StatementExecutionError(_describe(e), statement=str(statement)) from e

    async def insert_row(self, physical_table: str, row: dict[str, Any]) -> None:
        """Insert one row using a single bound JSON document.

        json_populate_record converts every value to its column type through
        the type's text input, so JSON strings land in date, numeric or uuid
        columns the same way a literal would, and nothing is interpolated.
        """
        table = quote_identifier(physical_table)
        if not row:
            await self._execute_write(f"INSERT INTO {table} DEFAULT VALUES")
            return

        columns = ", ".join(quote_identifier(name) for name in row)
        statement = text(
            f"INSERT INTO {table} ({columns}) "
            f"SELECT {columns} FROM json_populate_record(NULL::{table}, CAST(:row AS json))"
        )
        document = json.dumps(row, default=_json_default)
        try:
            async with self._engine.begin() as conn:
                await conn.execute(statement, {"row": document})
        except (SQLAlchemyError, OSError) as e:
            raise StatementExecutionError(_describe(e), statement=str(statement)) from e

    async def drop_table(self, physical_table: str) -> None:
        await self._execute_write(
            f"DROP TABLE IF EXISTS {quote_identifier(physical_table)} CASCADE"
        )

    async def _execute_write(self, statement: str) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.exec_driver_sql(statement)
        except (SQLAlchemyError, OSError) as e:
            raise StatementExecutionError(_describe(e), statement=statement) from e


def _describe(error: Exception) -> str:
    """Short message for an execution failure, without the SQL echo."""
    original = getattr(error, "orig", None)
    return str(original) if original is not None else str(error)
