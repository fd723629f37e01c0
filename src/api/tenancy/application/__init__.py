"""Tenancy application layer."""

from tenancy.application.services import TenantIsolationService

__all__ = ["TenantIsolationService"]
