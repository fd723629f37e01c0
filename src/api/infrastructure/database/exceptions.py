"""Database-specific exceptions shared by every bounded context."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class StatementExecutionError(DatabaseError):
    """Raised when a SQL statement fails at the database."""

    def __init__(self, message: str, statement: str | None = None):
        super().__init__(message)
        self.statement = statement
