"""
Persistence error taxonomy raised by the session, repositories and unit of work.
"""

from typing import Any, Optional


class PersistenceError(Exception):
    """Base class for persistence errors."""

    def __init__(self, message: str, detail: Any = None, orig: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.orig = orig


class StoreUnavailable(PersistenceError):
    """Connection or transport failure talking to the database. Never retried here."""


class ConstraintViolation(PersistenceError):
    """The database rejected a write (unique key, foreign key, value too long)."""


class InvalidQuery(PersistenceError):
    """Malformed query predicate; raised when the query is built, not when it runs."""


class TransactionStateError(PersistenceError):
    """Unit of work used out of order. Programmer error, not recoverable."""


class AlreadyInTransaction(TransactionStateError):
    pass


class NoActiveTransaction(TransactionStateError):
    pass


class UnitOfWorkClosed(TransactionStateError):
    """Unit of work was disposed, or a failed rollback left it unusable."""
