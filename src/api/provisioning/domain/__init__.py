"""Provisioning domain: identifiers, column types and table definitions."""

from provisioning.domain.column_types import map_column_type
from provisioning.domain.identifiers import sanitize_identifier
from provisioning.domain.value_objects import (
    ColumnDefinition,
    ModuleDefinition,
    ProvisioningResult,
    TableDefinition,
    TenantNamespace,
)

__all__ = [
    "ColumnDefinition",
    "ModuleDefinition",
    "ProvisioningResult",
    "TableDefinition",
    "TenantNamespace",
    "map_column_type",
    "sanitize_identifier",
]
