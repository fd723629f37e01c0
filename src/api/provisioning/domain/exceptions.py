"""Domain exceptions for the provisioning bounded context."""


class ProvisioningError(Exception):
    """Base exception for provisioning domain errors."""

    pass


class DuplicateColumnError(ProvisioningError):
    """Raised when two columns of one table sanitize to the same identifier.

    The table cannot be created; the orchestrator records this as that
    table's failure without issuing any SQL.
    """

    def __init__(self, table: str, column: str):
        super().__init__(
            f"duplicate column '{column}' after sanitization in table '{table}'"
        )
        self.table = table
        self.column = column


class InvalidReferenceError(ProvisioningError):
    """Raised when a foreign-key marker is not of the form 'table.column'."""

    def __init__(self, table: str, column: str, reference: str):
        super().__init__(
            f"invalid reference '{reference}' on {table}.{column}: "
            "expected 'table.column'"
        )
        self.reference = reference


class TenantNamespaceCollisionError(ProvisioningError):
    """Raised when a tenant id sanitizes to a namespace already claimed.

    Two raw tenant identifiers sharing a namespace would silently share
    tables in the shared-schema database.
    """

    def __init__(self, namespace: str, tenant_id: str, claimed_by: str):
        super().__init__(
            f"tenant '{tenant_id}' maps to namespace '{namespace}' "
            f"already used by tenant '{claimed_by}'"
        )
        self.namespace = namespace
        self.tenant_id = tenant_id
        self.claimed_by = claimed_by
