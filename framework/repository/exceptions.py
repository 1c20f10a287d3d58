"""
Repository and Unit of Work exceptions.

Store-level SQLAlchemy errors are translated into these so services and
controllers can react without importing driver details.
"""


class RepositoryError(Exception):
    """Base class for data-access errors."""


class NotFoundError(RepositoryError):
    """No record exists for the requested key."""


class ConflictError(RepositoryError):
    """A lookup expected to be unique matched more than one record."""


class PersistenceError(RepositoryError):
    """The store rejected a flush or commit; nothing staged took effect."""


class StaleRecordError(PersistenceError, NotFoundError):
    """An update or delete targeted a row that no longer exists."""


class InvalidStateError(RepositoryError):
    """Operation attempted on a disposed Unit of Work."""


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "ConflictError",
    "PersistenceError",
    "StaleRecordError",
    "InvalidStateError",
]
