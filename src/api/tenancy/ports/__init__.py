"""Ports for the tenancy bounded context."""

from tenancy.ports.exceptions import BranchQueryError
from tenancy.ports.repositories import IBranchDatabase, IBranchProvider

__all__ = ["BranchQueryError", "IBranchDatabase", "IBranchProvider"]
