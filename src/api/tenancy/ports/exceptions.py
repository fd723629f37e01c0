"""Port-level exceptions for the Tenancy bounded context."""


class BranchQueryError(Exception):
    """Raised when a caller-supplied statement fails on a tenant branch.

    This is the only tenancy failure that propagates; branch management
    calls report failure as None, False or an empty list instead.
    """

    def __init__(self, cause: str):
        super().__init__(f"Query failed: {cause}")
        self.cause = cause
