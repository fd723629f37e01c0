"""Shared database engine for FastAPI dependency injection.

Tenants in shared-schema mode all live in one physical database; this module
owns the single engine used to reach it.
"""

from __future__ import annotations

import threading

from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.engines import create_write_engine
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings

# Module-level probe for observability
_probe = DefaultConnectionProbe()

# Module-level engine instance (created on first use)
_write_engine: AsyncEngine | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_write_engine() -> AsyncEngine:
    """Get the shared database engine (singleton).

    Creates engine on first call and caches for subsequent calls.
    Uses double-check locking for thread-safe initialization.

    Returns:
        Configured async engine for the shared database
    """
    global _write_engine
    if _write_engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _write_engine is None:
                settings = get_database_settings()
                _write_engine = create_write_engine(settings)
    return _write_engine


async def close_database_connections() -> None:
    """Close the shared engine's connections.

    Should be called on application shutdown to properly cleanup connections.
    """
    global _write_engine

    if _write_engine is not None:
        await _write_engine.dispose()
        _probe.pool_closed()
        _write_engine = None
