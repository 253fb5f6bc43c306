"""
Errors raised while copying a database.

Every error aborts the whole copy. The only cleanup performed on the way out
is restoring the source database access mode.
"""

from typing import Any, Optional


class CopyError(Exception):
    """Base class for copy failures."""


class SourceUnavailableError(CopyError):
    """The source database is missing or not online."""

    def __init__(self, database: str, status: Optional[str] = None):
        self.database = database
        self.status = status
        if status is None:
            message = f"Unable to find database {database}"
        else:
            message = f"Unable to proceed. Database {database} is {status}"
        super().__init__(message)


class GuardStateConflictError(CopyError):
    """The source database cannot be switched to read-only mode."""

    def __init__(self, database: str, message: str):
        self.database = database
        super().__init__(f"Database {database}: {message}")


class MissingIdentityMappingError(CopyError):
    """A relationship endpoint has no copied counterpart in the target."""

    def __init__(self, source_id: Any):
        self.source_id = source_id
        super().__init__(f"Unable to find source node with id {source_id}")


class WriteFailureError(CopyError):
    """A batch could not be written to the target."""

    def __init__(self, phase: str, batch_index: int, cause: BaseException):
        self.phase = phase
        self.batch_index = batch_index
        self.cause = cause
        super().__init__(f"Failed to write {phase} batch {batch_index}: {cause}")
