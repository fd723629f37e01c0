"""Ports for the provisioning bounded context."""

from provisioning.ports.ddl import IDdlBuilder
from provisioning.ports.repositories import ITenantSchemaRepository

__all__ = ["IDdlBuilder", "ITenantSchemaRepository"]
