"""
Unit of Work: owns one session, the repositories built on it, and the transaction boundary.
"""

from enum import Enum
from typing import Dict, Optional, Type, TypeVar
from sqlmodel.ext.asyncio.session import AsyncSession

from .base import BaseRepository, translate_store_errors
from .exceptions import InvalidStateError

R = TypeVar("R", bound=BaseRepository)


class UnitOfWorkState(str, Enum):
    OPEN = "OPEN"
    COMMITTED = "COMMITTED"
    DISPOSED = "DISPOSED"


class UnitOfWork:
    """Shares one session across repositories and commits their staged changes atomically.

    Nothing is persisted until ``commit()``. ``dispose()`` (or leaving an
    ``async with`` block) discards uncommitted work and closes the session;
    any use of the unit or its repositories afterwards raises InvalidStateError.
    """

    def __init__(self, session: Optional[AsyncSession] = None):
        """Bind to one session; no I/O happens here."""
        if session is None:
            raise ValueError("Session must be provided.")

        self.session = session
        self.state = UnitOfWorkState.OPEN
        self._repositories: Dict[type, BaseRepository] = {}

    @property
    def is_disposed(self) -> bool:
        return self.state is UnitOfWorkState.DISPOSED

    def ensure_open(self) -> None:
        if self.is_disposed:
            raise InvalidStateError("UnitOfWork has been disposed")

    def get_repository(self, repo_class: Type[R]) -> R:
        """Get or create a repository instance (one per class for the life of this unit)."""
        self.ensure_open()
        if repo_class not in self._repositories:
            self._repositories[repo_class] = repo_class(self.session, guard=self.ensure_open)
        return self._repositories[repo_class]

    async def commit(self) -> None:
        """Persist every staged change in one transaction.

        On failure the transaction is rolled back and PersistenceError is raised.
        """
        self.ensure_open()
        async with translate_store_errors(self.session):
            await self.session.commit()
        self.state = UnitOfWorkState.COMMITTED

    async def rollback(self) -> None:
        """Discard all staged changes."""
        self.ensure_open()
        await self.session.rollback()

    async def flush(self) -> None:
        """Flush session (e.g. to get auto-increment IDs) without committing."""
        self.ensure_open()
        async with translate_store_errors(self.session):
            await self.session.flush()

    async def dispose(self) -> None:
        """Release the session; uncommitted changes are discarded."""
        if self.is_disposed:
            return
        self.state = UnitOfWorkState.DISPOSED
        self._repositories.clear()
        try:
            await self.session.rollback()
        finally:
            await self.session.close()

    async def __aenter__(self):
        self.ensure_open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.dispose()
