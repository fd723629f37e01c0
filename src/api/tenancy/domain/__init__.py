"""Tenancy domain: isolated database branches allocated per tenant."""

from tenancy.domain.value_objects import (
    BranchInfo,
    BranchTableSummary,
    QueryResult,
    TenantBranch,
)

__all__ = ["BranchInfo", "BranchTableSummary", "QueryResult", "TenantBranch"]
