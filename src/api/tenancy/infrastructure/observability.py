"""Domain probes for branch management and branch execution.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events of the branching API client and of statements
run against tenant branches. Connection strings are never passed here;
callers hand over a masked target instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class BranchClientProbe(Protocol):
    """Domain probe for the managed branching API client."""

    def branching_not_configured(self, action: str) -> None:
        """Record that a call was skipped because branching is disabled."""
        ...

    def branch_created(
        self,
        tenant_id: str,
        display_name: str,
        branch_id: str,
        branch_name: str,
        endpoint_host: str,
    ) -> None:
        """Record that a branch was created."""
        ...

    def branch_creation_failed(
        self, tenant_id: str, reason: str, status_code: int | None = None
    ) -> None:
        """Record that branch creation failed (caller falls back)."""
        ...

    def branch_deleted(self, branch_id: str) -> None:
        """Record that a branch was deleted."""
        ...

    def branch_deletion_failed(
        self, branch_id: str, reason: str, status_code: int | None = None
    ) -> None:
        """Record that branch deletion failed."""
        ...

    def branch_listing_failed(
        self, reason: str, status_code: int | None = None
    ) -> None:
        """Record that listing branches or endpoints failed."""
        ...

    def with_context(self, context: ObservationContext) -> BranchClientProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultBranchClientProbe:
    """Default implementation of BranchClientProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultBranchClientProbe:
        """Create a new probe with observation context bound."""
        return DefaultBranchClientProbe(logger=self._logger, context=context)

    def branching_not_configured(self, action: str) -> None:
        self._logger.info(
            "branching_not_configured",
            action=action,
            **self._get_context_kwargs(),
        )

    def branch_created(
        self,
        tenant_id: str,
        display_name: str,
        branch_id: str,
        branch_name: str,
        endpoint_host: str,
    ) -> None:
        self._logger.info(
            "tenant_branch_created",
            tenant_id=tenant_id,
            display_name=display_name,
            branch_id=branch_id,
            branch_name=branch_name,
            endpoint_host=endpoint_host,
            **self._get_context_kwargs(),
        )

    def branch_creation_failed(
        self, tenant_id: str, reason: str, status_code: int | None = None
    ) -> None:
        self._logger.error(
            "tenant_branch_creation_failed",
            tenant_id=tenant_id,
            reason=reason,
            status_code=status_code,
            **self._get_context_kwargs(),
        )

    def branch_deleted(self, branch_id: str) -> None:
        self._logger.info(
            "tenant_branch_deleted",
            branch_id=branch_id,
            **self._get_context_kwargs(),
        )

    def branch_deletion_failed(
        self, branch_id: str, reason: str, status_code: int | None = None
    ) -> None:
        self._logger.error(
            "tenant_branch_deletion_failed",
            branch_id=branch_id,
            reason=reason,
            status_code=status_code,
            **self._get_context_kwargs(),
        )

    def branch_listing_failed(
        self, reason: str, status_code: int | None = None
    ) -> None:
        self._logger.warning(
            "tenant_branch_listing_failed",
            reason=reason,
            status_code=status_code,
            **self._get_context_kwargs(),
        )


class BranchDatabaseProbe(Protocol):
    """Domain probe for statements executed on tenant branches."""

    def branch_query_failed(self, target: str, error: str) -> None:
        """Record that a caller-supplied statement failed."""
        ...

    def branch_tables_listing_failed(self, target: str, error: str) -> None:
        """Record that branch introspection failed."""
        ...

    def branch_pools_released(self, endpoint_host: str, count: int) -> None:
        """Record that pools for a deleted branch endpoint were disposed."""
        ...

    def with_context(self, context: ObservationContext) -> BranchDatabaseProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultBranchDatabaseProbe:
    """Default implementation of BranchDatabaseProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultBranchDatabaseProbe:
        return DefaultBranchDatabaseProbe(logger=self._logger, context=context)

    def branch_query_failed(self, target: str, error: str) -> None:
        self._logger.warning(
            "branch_query_failed",
            target=target,
            error=error,
            **self._get_context_kwargs(),
        )

    def branch_tables_listing_failed(self, target: str, error: str) -> None:
        self._logger.error(
            "branch_tables_listing_failed",
            target=target,
            error=error,
            **self._get_context_kwargs(),
        )

    def branch_pools_released(self, endpoint_host: str, count: int) -> None:
        self._logger.info(
            "branch_pools_released",
            endpoint_host=endpoint_host,
            count=count,
            **self._get_context_kwargs(),
        )
