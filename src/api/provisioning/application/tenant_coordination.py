"""Process-wide coordination between requests for the same tenant.

Two pieces of shared state live here: which raw tenant id claimed each
namespace, and one asyncio lock per namespace so provisioning and teardown
of a tenant never interleave within this process.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from provisioning.domain.exceptions import TenantNamespaceCollisionError
from provisioning.domain.value_objects import TenantNamespace


class NamespaceRegistry:
    """Remembers the raw tenant id behind every namespace seen so far.

    Claims are in-memory only; they guard against collisions between tenants
    active in the same process, not across restarts. Every call resolving a
    namespace claims it, reads included, and only a successful teardown
    releases it, so the registry grows with the number of distinct tenants
    served (one short string pair each).
    """

    def __init__(self) -> None:
        self._claims: dict[str, str] = {}
        self._lock = threading.Lock()

    def claim(self, namespace: TenantNamespace) -> None:
        """Claim a namespace for its tenant id.

        Raises:
            TenantNamespaceCollisionError: If another tenant id holds it
        """
        with self._lock:
            claimed_by = self._claims.setdefault(namespace.value, namespace.tenant_id)
        if claimed_by != namespace.tenant_id:
            raise TenantNamespaceCollisionError(
                namespace=namespace.value,
                tenant_id=namespace.tenant_id,
                claimed_by=claimed_by,
            )

    def release(self, namespace: TenantNamespace) -> None:
        with self._lock:
            if self._claims.get(namespace.value) == namespace.tenant_id:
                del self._claims[namespace.value]

    def owner(self, namespace_value: str) -> str | None:
        return self._claims.get(namespace_value)


class TenantLocks:
    """One asyncio.Lock per namespace, alive while someone holds or awaits it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def lock_for(self, namespace: TenantNamespace) -> asyncio.Lock:
        return self._locks.setdefault(namespace.value, asyncio.Lock())

    @asynccontextmanager
    async def hold(self, namespace: TenantNamespace) -> AsyncIterator[None]:
        """Serialize the enclosed block against others for the same tenant."""
        key = namespace.value
        lock = self.lock_for(namespace)
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if not self._waiters[key]:
                del self._waiters[key]
                self._locks.pop(key, None)
