"""Database infrastructure: engines, branch pools and their failures.

Adapters in the bounded contexts translate driver errors into
StatementExecutionError so services never see SQLAlchemy exceptions.
"""

from infrastructure.database.exceptions import (
    DatabaseError,
    StatementExecutionError,
)

__all__ = [
    "DatabaseError",
    "StatementExecutionError",
]
