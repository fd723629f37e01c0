"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for database connection and pool observability.

    This probe captures domain-significant events related to the shared
    engine and the per-branch pools without exposing logging details.
    """

    def branch_pool_created(self, target: str, max_connections: int) -> None:
        """Record that a pool was created for a branch connection string."""
        ...

    def branch_pool_evicted(self, target: str) -> None:
        """Record that a branch pool was removed from the registry."""
        ...

    def branch_pools_closed(self, count: int) -> None:
        """Record that all branch pools were disposed."""
        ...

    def pool_closed(self) -> None:
        """Record that the shared connection pool was closed."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog.

    Supports observation context for including request-scoped metadata
    with all log events. Targets are always masked connection strings.
    """

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

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def branch_pool_created(self, target: str, max_connections: int) -> None:
        self._logger.info(
            "branch_pool_created",
            target=target,
            max_connections=max_connections,
            **self._get_context_kwargs(),
        )

    def branch_pool_evicted(self, target: str) -> None:
        self._logger.info(
            "branch_pool_evicted",
            target=target,
            **self._get_context_kwargs(),
        )

    def branch_pools_closed(self, count: int) -> None:
        self._logger.info(
            "branch_pools_closed",
            count=count,
            **self._get_context_kwargs(),
        )

    def pool_closed(self) -> None:
        """Record that the shared connection pool was closed."""
        self._logger.info(
            "connection_pool_closed",
            **self._get_context_kwargs(),
        )
