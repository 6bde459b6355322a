"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers such as
the batch reconciler can catch a failed write with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialized or reached.

    Examples:
    - Empty or malformed database URL
    - SQLite file not accessible
    - Database driver not installed
    - Session requested before init()
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an operation requires a record that does not exist.

    Lookups that may legitimately miss return None instead.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised on a constraint violation.

    Examples:
    - Match score outside 0-100
    - Duplicate record id on import
    """

    pass


class RecordImportError(PersistenceError):
    """Raised when a records file cannot be read or contains invalid records."""

    def __init__(self, message: str, errors=None):
        self.errors = list(errors or [])
        super().__init__(message)
