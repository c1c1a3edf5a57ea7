"""
Persistence exceptions for the game database.

Repositories raise these instead of driver errors so callers can tell a
duplicate key from a blocked delete from a lost update without parsing
database messages. Every exception carries a human-readable ``message`` and
a ``details`` dict with the table, key and constraint involved when known.
"""

from typing import Any, Dict, Optional


class PersistenceError(Exception):
    """Base class for all data-access errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"{self.message}{details_str}"


class RecordNotFoundError(PersistenceError):
    """The requested row does not exist."""


class IntegrityViolationError(PersistenceError):
    """A database constraint rejected the write."""


class DuplicateRecordError(IntegrityViolationError):
    """A unique or primary-key constraint was violated."""


class ForeignKeyViolationError(IntegrityViolationError):
    """A foreign-key constraint was violated."""


class RestrictedDeleteError(ForeignKeyViolationError):
    """A delete was blocked because other rows still reference the target."""


class CheckViolationError(IntegrityViolationError):
    """A CHECK constraint (value range) was violated."""


class ConcurrencyConflictError(PersistenceError):
    """
    The row changed since it was read.

    Raised when an update carries a stale version stamp. The caller must
    reload the row and decide whether to reapply its change; nothing here
    retries on its behalf.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
    ) -> None:
        details = dict(details or {})
        if expected_version is not None:
            details.setdefault("expected_version", expected_version)
        if actual_version is not None:
            details.setdefault("actual_version", actual_version)
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(message, details)


class InvalidStateError(PersistenceError):
    """The operation is not allowed in the row's current lifecycle state."""


class InvalidInputError(PersistenceError):
    """A value failed validation before reaching the database."""
