"""Domain probes for the provisioning application service.

Captures the provisioning lifecycle (create pass, foreign-key pass) and the
best-effort introspection and maintenance operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ProvisioningServiceProbe(Protocol):
    """Domain probe for schema provisioning operations."""

    def provisioning_started(self, namespace: str, table_count: int) -> None: ...

    def provisioning_completed(
        self, namespace: str, created: int, errors: int
    ) -> None: ...

    def table_created(self, namespace: str, table: str) -> None: ...

    def table_creation_failed(self, namespace: str, table: str, error: str) -> None: ...

    def foreign_key_added(self, namespace: str, constraint: str) -> None: ...

    def foreign_key_failed(
        self, namespace: str, constraint: str, error: str
    ) -> None: ...

    def namespace_collision(
        self, namespace: str, tenant_id: str, claimed_by: str
    ) -> None: ...

    def tables_listed(self, namespace: str, count: int) -> None: ...

    def table_listing_failed(self, namespace: str, error: str) -> None: ...

    def table_read_failed(self, namespace: str, table: str, error: str) -> None: ...

    def row_insert_failed(self, namespace: str, table: str, error: str) -> None: ...

    def rows_inserted(
        self, namespace: str, table: str, inserted: int, requested: int
    ) -> None: ...

    def table_dropped(self, namespace: str, table: str) -> None: ...

    def table_drop_failed(self, namespace: str, table: str, error: str) -> None: ...

    def with_context(self, context: ObservationContext) -> ProvisioningServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProvisioningServiceProbe:
    """Default implementation of ProvisioningServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultProvisioningServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultProvisioningServiceProbe(logger=self._logger, context=context)

    def provisioning_started(self, namespace: str, table_count: int) -> None:
        self._logger.info(
            "provisioning_started",
            namespace=namespace,
            table_count=table_count,
            **self._get_context_kwargs(),
        )

    def provisioning_completed(
        self, namespace: str, created: int, errors: int
    ) -> None:
        log = self._logger.warning if errors else self._logger.info
        log(
            "provisioning_completed",
            namespace=namespace,
            created=created,
            errors=errors,
            **self._get_context_kwargs(),
        )

    def table_created(self, namespace: str, table: str) -> None:
        self._logger.info(
            "table_created",
            namespace=namespace,
            table=table,
            **self._get_context_kwargs(),
        )

    def table_creation_failed(self, namespace: str, table: str, error: str) -> None:
        self._logger.error(
            "table_creation_failed",
            namespace=namespace,
            table=table,
            error=error,
            **self._get_context_kwargs(),
        )

    def foreign_key_added(self, namespace: str, constraint: str) -> None:
        self._logger.debug(
            "foreign_key_added",
            namespace=namespace,
            constraint=constraint,
            **self._get_context_kwargs(),
        )

    def foreign_key_failed(self, namespace: str, constraint: str, error: str) -> None:
        self._logger.error(
            "foreign_key_failed",
            namespace=namespace,
            constraint=constraint,
            error=error,
            **self._get_context_kwargs(),
        )

    def namespace_collision(
        self, namespace: str, tenant_id: str, claimed_by: str
    ) -> None:
        self._logger.error(
            "tenant_namespace_collision",
            namespace=namespace,
            tenant_id=tenant_id,
            claimed_by=claimed_by,
            **self._get_context_kwargs(),
        )

    def tables_listed(self, namespace: str, count: int) -> None:
        self._logger.debug(
            "tenant_tables_listed",
            namespace=namespace,
            count=count,
            **self._get_context_kwargs(),
        )

    def table_listing_failed(self, namespace: str, error: str) -> None:
        self._logger.error(
            "tenant_table_listing_failed",
            namespace=namespace,
            error=error,
            **self._get_context_kwargs(),
        )

    def table_read_failed(self, namespace: str, table: str, error: str) -> None:
        self._logger.error(
            "table_read_failed",
            namespace=namespace,
            table=table,
            error=error,
            **self._get_context_kwargs(),
        )

    def row_insert_failed(self, namespace: str, table: str, error: str) -> None:
        self._logger.warning(
            "row_insert_failed",
            namespace=namespace,
            table=table,
            error=error,
            **self._get_context_kwargs(),
        )

    def rows_inserted(
        self, namespace: str, table: str, inserted: int, requested: int
    ) -> None:
        self._logger.info(
            "rows_inserted",
            namespace=namespace,
            table=table,
            inserted=inserted,
            requested=requested,
            **self._get_context_kwargs(),
        )

    def table_dropped(self, namespace: str, table: str) -> None:
        self._logger.info(
            "table_dropped",
            namespace=namespace,
            table=table,
            **self._get_context_kwargs(),
        )

    def table_drop_failed(self, namespace: str, table: str, error: str) -> None:
        self._logger.error(
            "table_drop_failed",
            namespace=namespace,
            table=table,
            error=error,
            **self._get_context_kwargs(),
        )
