"""
Repository pattern: data access abstraction, decouples service layer from database session.
"""

from .base import BaseRepository, IRepository, translate_store_errors
from .exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    RepositoryError,
    StaleRecordError,
)
from .unit_of_work import UnitOfWork, UnitOfWorkState

__all__ = [
    "BaseRepository",
    "IRepository",
    "translate_store_errors",
    "UnitOfWork",
    "UnitOfWorkState",
    "RepositoryError",
    "NotFoundError",
    "ConflictError",
    "PersistenceError",
    "StaleRecordError",
    "InvalidStateError",
]
