"""Client for the Neon branching API.

Every public method follows the soft-failure contract: network errors,
timeouts, non-success statuses and malformed payloads are reported through
the probe and resolve to None, False or an empty list. Callers then fall
back to shared-schema tenancy.
"""

from __future__ import annotations

import re
from typing import Any

import httpx
from sqlalchemy.engine import URL

from infrastructure.settings import BranchingSettings
from tenancy.domain.value_objects import BranchInfo, TenantBranch
from tenancy.infrastructure.observability import (
    BranchClientProbe,
    DefaultBranchClientProbe,
)
from tenancy.ports.repositories import IBranchProvider

READ_WRITE_ENDPOINT = "read_write"

# Neon branch ids, e.g. "br-quiet-hill-123"; anything else never reaches a URL path
BRANCH_ID_PATTERN = re.compile(r"br-[a-z0-9-]+")


class BranchPayloadError(ValueError):
    """Raised internally when the API answers with an unexpected shape."""


def is_valid_branch_id(branch_id: str) -> bool:
    return bool(BRANCH_ID_PATTERN.fullmatch(branch_id))


class NeonBranchClient(IBranchProvider):
    """Creates, deletes and lists branches of one parent Neon project."""

    def __init__(
        self,
        settings: BranchingSettings,
        probe: BranchClientProbe | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            settings: Branching settings (API key, project, role, database)
            probe: Optional domain probe for observability
            transport: HTTP transport override, used by tests
        """
        self._settings = settings
        self._probe = probe or DefaultBranchClientProbe()
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def branch_name_for(self, tenant_id: str) -> str:
        """Deterministic branch name: fixed tag plus a bounded tenant id prefix."""
        max_chars = self._settings.branch_name_max_tenant_chars
        return f"{self._settings.branch_name_prefix}-{tenant_id[:max_chars]}"

    def connection_string_for(self, endpoint_host: str) -> str:
        """Connection string for a branch endpoint, with TLS required."""
        url = URL.create(
            "postgresql",
            username=self._settings.role_name,
            password=self._settings.role_password.get_secret_value() or None,
            host=endpoint_host,
            database=self._settings.database_name,
            query={"sslmode": "require"},
        )
        return url.render_as_string(hide_password=False)

    def _client(self) -> httpx.AsyncClient:
        api_key = self._settings.api_key
        token = api_key.get_secret_value() if api_key is not None else ""
        base_url = self._settings.api_base_url.rstrip("/")
        return httpx.AsyncClient(
            base_url=f"{base_url}/projects/{self._settings.project_id}",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
            timeout=self._settings.request_timeout_seconds,
            transport=self._transport,
        )

    async def create_branch(
        self, tenant_id: str, display_name: str
    ) -> TenantBranch | None:
        """Create a branch with one read-write endpoint for a tenant.

        Args:
            tenant_id: Raw tenant id; its first characters name the branch
            display_name: Human-readable project name (logging only)

        Returns:
            TenantBranch, or None if branching is disabled or anything failed
        """
        if not self.is_configured:
            self._probe.branching_not_configured(action="create_branch")
            return None

        branch_name = self.branch_name_for(tenant_id)
        body = {
            "endpoints": [{"type": READ_WRITE_ENDPOINT}],
            "branch": {"name": branch_name},
        }

        try:
            async with self._client() as client:
                response = await client.post("/branches", json=body)
        except httpx.HTTPError as e:
            self._probe.branch_creation_failed(tenant_id=tenant_id, reason=repr(e))
            return None

        if not response.is_success:
            self._probe.branch_creation_failed(
                tenant_id=tenant_id,
                reason=response.text,
                status_code=response.status_code,
            )
            return None

        try:
            branch, endpoint_host = self._parse_created_branch(response)
        except BranchPayloadError as e:
            self._probe.branch_creation_failed(
                tenant_id=tenant_id,
                reason=str(e),
                status_code=response.status_code,
            )
            return None

        tenant_branch = TenantBranch(
            branch_id=str(branch["id"]),
            branch_name=branch_name,
            endpoint_host=endpoint_host,
            connection_string=self.connection_string_for(endpoint_host),
            created_at=str(branch.get("created_at", "")),
        )
        self._probe.branch_created(
            tenant_id=tenant_id,
            display_name=display_name,
            branch_id=tenant_branch.branch_id,
            branch_name=branch_name,
            endpoint_host=endpoint_host,
        )
        return tenant_branch

    @staticmethod
    def _parse_created_branch(
        response: httpx.Response,
    ) -> tuple[dict[str, Any], str]:
        try:
            data = response.json()
        except ValueError as e:
            raise BranchPayloadError("response is not JSON") from e

        if not isinstance(data, dict):
            raise BranchPayloadError("response is not an object")

        branch = data.get("branch")
        if not isinstance(branch, dict) or not branch.get("id"):
            raise BranchPayloadError("response has no branch id")

        endpoints = data.get("endpoints") or []
        host = next(
            (
                endpoint.get("host")
                for endpoint in endpoints
                if isinstance(endpoint, dict)
                and endpoint.get("type") == READ_WRITE_ENDPOINT
                and endpoint.get("host")
            ),
            None,
        )
        if host is None:
            raise BranchPayloadError("no read-write endpoint returned for branch")
        return branch, host

    async def delete_branch(self, branch_id: str) -> bool:
        if not self.is_configured:
            self._probe.branching_not_configured(action="delete_branch")
            return False

        if not is_valid_branch_id(branch_id):
            self._probe.branch_deletion_failed(
                branch_id=branch_id, reason="invalid branch id"
            )
            return False

        try:
            async with self._client() as client:
                response = await client.delete(f"/branches/{branch_id}")
        except httpx.HTTPError as e:
            self._probe.branch_deletion_failed(branch_id=branch_id, reason=repr(e))
            return False

        if not response.is_success:
            self._probe.branch_deletion_failed(
                branch_id=branch_id,
                reason=response.text,
                status_code=response.status_code,
            )
            return False

        self._probe.branch_deleted(branch_id=branch_id)
        return True

    async def list_branches(self) -> list[BranchInfo]:
        if not self.is_configured:
            return []

        data = await self._get_json("/branches")
        if data is None:
            return []

        branches: list[BranchInfo] = []
        for entry in data.get("branches") or []:
            if not isinstance(entry, dict):
                continue
            try:
                branches.append(BranchInfo.from_payload(entry))
            except ValueError as e:
                self._probe.branch_listing_failed(reason=str(e))
        return branches

    async def get_endpoint_hosts(self, branch_id: str) -> list[str]:
        if not self.is_configured:
            return []

        if not is_valid_branch_id(branch_id):
            self._probe.branch_listing_failed(reason=f"invalid branch id {branch_id!r}")
            return []

        data = await self._get_json(f"/branches/{branch_id}/endpoints")
        if data is None:
            return []

        return [
            endpoint["host"]
            for endpoint in data.get("endpoints") or []
            if isinstance(endpoint, dict) and endpoint.get("host")
        ]

    async def _get_json(self, path: str) -> dict[str, Any] | None:
        try:
            async with self._client() as client:
                response = await client.get(path)
        except httpx.HTTPError as e:
            self._probe.branch_listing_failed(reason=repr(e))
            return None

        if not response.is_success:
            self._probe.branch_listing_failed(
                reason=response.text, status_code=response.status_code
            )
            return None

        try:
            data = response.json()
        except ValueError as e:
            self._probe.branch_listing_failed(reason=repr(e))
            return None

        if not isinstance(data, dict):
            self._probe.branch_listing_failed(reason="response is not an object")
            return None
        return data
