"""Shared infrastructure dependencies.

Provides ONLY raw database infrastructure resources (engines, pool registry).
Does NOT import from bounded contexts to maintain DDD boundaries.
"""

from functools import lru_cache

from infrastructure.database.connection_pool import BranchPoolRegistry
from infrastructure.settings import get_database_settings


@lru_cache
def get_branch_pool_registry() -> BranchPoolRegistry:
    """Get the application-scoped branch pool registry (singleton).

    The registry is shared across all requests; the application lifespan
    disposes it on shutdown.

    Returns:
        BranchPoolRegistry configured with the branch pool bounds.
    """
    settings = get_database_settings()
    return BranchPoolRegistry(settings)


async def close_branch_pools() -> None:
    """Dispose every branch pool and forget the registry."""
    if get_branch_pool_registry.cache_info().currsize == 0:
        return
    await get_branch_pool_registry().dispose_all()
    get_branch_pool_registry.cache_clear()
