"""Statement execution and introspection on tenant branches.

Connections come from the process-wide BranchPoolRegistry, so every branch
is reached through exactly one bounded pool.
"""

from __future__ import annotations

from sqlalchemy import func, select, table, text
from sqlalchemy.exc import SQLAlchemyError

from infrastructure.database.connection_pool import BranchPoolRegistry
from infrastructure.database.engines import mask_connection_string
from tenancy.domain.value_objects import BranchTableSummary, QueryResult
from tenancy.infrastructure.observability import (
    BranchDatabaseProbe,
    DefaultBranchDatabaseProbe,
)
from tenancy.ports.exceptions import BranchQueryError
from tenancy.ports.repositories import IBranchDatabase

_PUBLIC_TABLES_SQL = text(
    """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = 'public'
    ORDER BY table_name
    """
)

_TABLE_COLUMNS_SQL = text(
    """
    SELECT column_name
    FROM information_schema.columns
    WHERE table_schema = 'public' AND table_name = :table_name
    ORDER BY ordinal_position
    """
)


class BranchDatabase(IBranchDatabase):
    """Runs statements on tenant branches through pooled engines."""

    def __init__(
        self,
        registry: BranchPoolRegistry,
        probe: BranchDatabaseProbe | None = None,
    ):
        self._registry = registry
        self._probe = probe or DefaultBranchDatabaseProbe()

    async def execute(self, connection_string: str, query: str) -> QueryResult:
        """Execute one caller-supplied statement and commit it.

        Raises:
            BranchQueryError: With the driver's message on any failure
        """
        try:
            engine = self._registry.get_pool(connection_string)
            async with engine.begin() as conn:
                result = await conn.exec_driver_sql(query)
                rows = (
                    [dict(row._mapping) for row in result] if result.returns_rows else []
                )
                affected = result.rowcount
        except (SQLAlchemyError, OSError) as e:
            cause = str(getattr(e, "orig", None) or e)
            self._probe.branch_query_failed(
                target=mask_connection_string(connection_string), error=cause
            )
            raise BranchQueryError(cause) from e

        row_count = affected if affected and affected > 0 else len(rows)
        return QueryResult(rows=rows, row_count=row_count)

    async def list_tables(self, connection_string: str) -> list[BranchTableSummary]:
        """All public tables on the branch with columns and row counts.

        Best-effort: any failure yields an empty list.
        """
        try:
            engine = self._registry.get_pool(connection_string)
            async with engine.connect() as conn:
                names = (await conn.execute(_PUBLIC_TABLES_SQL)).scalars().all()
                summaries: list[BranchTableSummary] = []
                for name in names:
                    columns = (
                        await conn.execute(_TABLE_COLUMNS_SQL, {"table_name": name})
                    ).scalars().all()
                    row_count = await conn.scalar(
                        select(func.count()).select_from(table(name))
                    )
                    summaries.append(
                        BranchTableSummary(
                            name=name,
                            columns=list(columns),
                            row_count=int(row_count or 0),
                        )
                    )
        except (SQLAlchemyError, OSError) as e:
            self._probe.branch_tables_listing_failed(
                target=mask_connection_string(connection_string),
                error=str(getattr(e, "orig", None) or e),
            )
            return []

        return summaries

    async def release(self, endpoint_host: str) -> int:
        released = 0
        for connection_string in self._registry.connection_strings_for_host(
            endpoint_host
        ):
            if await self._registry.evict(connection_string):
                released += 1
        self._probe.branch_pools_released(endpoint_host=endpoint_host, count=released)
        return released
