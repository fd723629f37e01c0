"""Provisioning application layer.

Contains the application service that orchestrates DDL synthesis and
execution and provides the public API for the Provisioning bounded context.
"""

from provisioning.application.services import SchemaProvisioningService

__all__ = ["SchemaProvisioningService"]
