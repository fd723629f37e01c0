"""Registry of per-branch connection pools.

Tenants with a dedicated database branch are reached through their own
connection string. This module keeps exactly one bounded async engine (and
therefore one connection pool) per distinct connection string.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Callable

from sqlalchemy.engine import make_url

from infrastructure.database.engines import (
    create_branch_engine,
    mask_connection_string,
)
from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from infrastructure.settings import DatabaseSettings

EngineFactory = Callable[[str, "DatabaseSettings"], "AsyncEngine"]


class BranchPoolRegistry:
    """Thread-safe get-or-create registry of branch engines.

    The registry is owned by the application lifespan: it is created once,
    `evict()` is called when a branch is deleted, and `dispose_all()` runs on
    shutdown.

    Attributes:
        _settings: Database settings carrying the branch pool bounds
        _pools: Engines keyed by connection string
        _lock: Guards the get-or-create step
        _probe: Observability probe for monitoring
    """

    def __init__(
        self,
        settings: DatabaseSettings,
        probe: ConnectionProbe | None = None,
        engine_factory: EngineFactory | None = None,
    ):
        """Initialize the registry.

        Args:
            settings: Database settings carrying the branch pool bounds
            probe: Optional observability probe
            engine_factory: Engine constructor, overridable in tests
        """
        self._settings = settings
        self._probe = probe or DefaultConnectionProbe()
        self._engine_factory = engine_factory or create_branch_engine
        self._pools: dict[str, AsyncEngine] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, connection_string: object) -> bool:
        return connection_string in self._pools

    def get_pool(self, connection_string: str) -> AsyncEngine:
        """Get the engine for a connection string, creating it on first use.

        Uses double-check locking so concurrent first use never creates two
        pools for the same connection string.

        Args:
            connection_string: Branch connection string

        Returns:
            The single AsyncEngine registered for that connection string
        """
        engine = self._pools.get(connection_string)
        if engine is not None:
            return engine

        with self._lock:
            # Double-check after acquiring lock
            engine = self._pools.get(connection_string)
            if engine is None:
                engine = self._engine_factory(connection_string, self._settings)
                self._pools[connection_string] = engine
                self._probe.branch_pool_created(
                    target=mask_connection_string(connection_string),
                    max_connections=self._settings.branch_pool_max_connections,
                )
        return engine

    def connection_strings_for_host(self, host: str) -> list[str]:
        """List registered connection strings that point at a given host."""
        return [cs for cs in list(self._pools) if make_url(cs).host == host]

    async def evict(self, connection_string: str) -> bool:
        """Remove and dispose the pool for a connection string.

        Returns:
            True if a pool was registered and has been disposed
        """
        with self._lock:
            engine = self._pools.pop(connection_string, None)

        if engine is None:
            return False

        await engine.dispose()
        self._probe.branch_pool_evicted(
            target=mask_connection_string(connection_string)
        )
        return True

    async def dispose_all(self) -> None:
        """Dispose every registered pool. Called on application shutdown."""
        with self._lock:
            engines = list(self._pools.values())
            self._pools.clear()

        for engine in engines:
            await engine.dispose()
        self._probe.branch_pools_closed(count=len(engines))
