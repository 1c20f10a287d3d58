"""
Repository abstract base class and generic implementation.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Generic, List, Optional, Type, TypeVar
from sqlalchemy import func, inspect
from sqlalchemy.exc import MultipleResultsFound, SQLAlchemyError
from sqlalchemy.orm import make_transient_to_detached
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from .exceptions import ConflictError, NotFoundError, PersistenceError, StaleRecordError

T = TypeVar("T", bound=SQLModel)


@asynccontextmanager
async def translate_store_errors(session: AsyncSession):
    """Roll back and re-raise store failures as repository errors.

    Reads autoflush staged writes, so a query can fail the same way a commit does.
    """
    try:
        yield
    except StaleDataError as e:
        await session.rollback()
        raise StaleRecordError(str(e)) from e
    except SQLAlchemyError as e:
        await session.rollback()
        raise PersistenceError(str(e)) from e


class IRepository(ABC, Generic[T]):
    """Repository interface; writes are staged and persisted by the owning UnitOfWork."""

    @abstractmethod
    def get(self) -> AsyncIterator[T]:
        """Stream all entities in store order."""
        pass

    @abstractmethod
    async def get_by_id(self, predicate: Any) -> Optional[T]:
        """Get the single entity matching a predicate or primary key value."""
        pass

    @abstractmethod
    async def add(self, entity: T) -> T:
        """Stage entity for insertion."""
        pass

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Stage a full overwrite of an existing entity."""
        pass

    @abstractmethod
    async def delete(self, entity: T) -> None:
        """Stage removal of an entity."""
        pass


class BaseRepository(IRepository[T]):
    """Generic repository implementation with SQLModel CRUD; subclasses add custom queries."""

    def __init__(
        self,
        session: AsyncSession,
        model: Type[T],
        guard: Optional[Callable[[], None]] = None,
    ):
        """Initialize repository with session and model.

        ``guard`` is called before every operation; the UnitOfWork passes a
        callable that raises once the unit has been disposed.
        """
        self.session = session
        self.model = model
        self._guard = guard
        self._mapper = inspect(model)

    def _check_open(self) -> None:
        if self._guard is not None:
            self._guard()

    def get(self) -> AsyncIterator[T]:
        """Stream all entities; the caller may stop iterating at any point."""
        self._check_open()
        return self._stream(select(self.model))

    async def _stream(self, statement) -> AsyncIterator[T]:
        async with translate_store_errors(self.session):
            result = await self.session.stream_scalars(statement)
            try:
                async for entity in result:
                    yield entity
            finally:
                await result.close()

    async def take(self, limit: int) -> List[T]:
        """First ``limit`` entities of ``get()``, without loading the rest."""
        entities: List[T] = []
        if limit <= 0:
            self._check_open()
            return entities
        stream = self.get()
        try:
            async for entity in stream:
                entities.append(entity)
                if len(entities) >= limit:
                    break
        finally:
            await stream.aclose()
        return entities

    async def get_by_id(self, predicate: Any) -> Optional[T]:
        """Get entity by predicate (``Model.id == 1``) or by primary key value.

        Raises ConflictError when more than one row matches.
        """
        self._check_open()
        if not isinstance(predicate, ColumnElement):
            predicate = self._mapper.primary_key[0] == predicate
        statement = select(self.model).where(predicate)
        return await self._one_or_none(statement)

    async def get_all(self, limit: int = 100, offset: int = 0) -> List[T]:
        """Get all entities (paginated)."""
        self._check_open()
        return await self._all(select(self.model).limit(limit).offset(offset))

    async def add(self, entity: T) -> T:
        """Stage entity for insertion."""
        self._check_open()
        self.session.add(entity)
        return entity

    async def update(self, entity: T) -> T:
        """Stage a full overwrite of the row identified by the entity's primary key.

        A row that does not exist is reported at commit time as StaleRecordError.
        """
        self._check_open()
        state = inspect(entity)
        if state.session_id is not None:
            # Already tracked by this session; changes are picked up on flush.
            self.session.add(entity)
            return entity

        if None in self._mapper.primary_key_from_instance(entity):
            raise NotFoundError(f"{self.model.__name__} without identifier cannot be updated")

        existing = self._loaded(entity)
        if existing is not None:
            for key in self._column_keys():
                setattr(existing, key, getattr(entity, key))
            return existing

        if state.transient:
            make_transient_to_detached(entity)
        self.session.add(entity)
        state = inspect(entity)
        for key in self._column_keys():
            if key in state.dict:
                flag_modified(entity, key)
        return entity

    async def delete(self, entity: T) -> None:
        """Stage removal of the row identified by the entity's primary key."""
        self._check_open()
        state = inspect(entity)
        if state.session_id is None:
            identity = tuple(self._mapper.primary_key_from_instance(entity))
            async with translate_store_errors(self.session):
                entity = self._loaded(entity) or await self.session.get(self.model, identity)
            if entity is None:
                raise NotFoundError(f"{self.model.__name__} {identity} does not exist")
        async with translate_store_errors(self.session):
            await self.session.delete(entity)

    async def find_one(self, **filters) -> Optional[T]:
        """Find one entity by filters (e.g. name='Books'); ConflictError on several matches."""
        self._check_open()
        return await self._one_or_none(self._filtered(select(self.model), filters))

    async def find_all(self, **filters) -> List[T]:
        """Find entities by filters."""
        self._check_open()
        return await self._all(self._filtered(select(self.model), filters))

    async def count(self, **filters) -> int:
        """Count entities matching filters."""
        self._check_open()
        pk = self._mapper.primary_key[0]
        async with translate_store_errors(self.session):
            result = await self.session.exec(self._filtered(select(func.count(pk)), filters))
            return result.one()

    def _filtered(self, statement, filters: dict):
        for key, value in filters.items():
            if hasattr(self.model, key):
                statement = statement.where(getattr(self.model, key) == value)
        return statement

    async def _all(self, statement) -> List[T]:
        async with translate_store_errors(self.session):
            result = await self.session.exec(statement)
            return list(result.all())

    async def _one_or_none(self, statement) -> Optional[T]:
        async with translate_store_errors(self.session):
            result = await self.session.exec(statement)
            try:
                return result.one_or_none()
            except MultipleResultsFound as e:
                raise ConflictError(
                    f"Expected at most one {self.model.__name__}, store returned several"
                ) from e

    def _loaded(self, entity: T) -> Optional[T]:
        """Instance with the same identity already present in the session, if any."""
        key = self._mapper.identity_key_from_instance(entity)
        existing = self.session.sync_session.identity_map.get(key)
        if existing is entity:
            return None
        return existing

    def _column_keys(self) -> List[str]:
        primary = {column.key for column in self._mapper.primary_key}
        return [attr.key for attr in self._mapper.column_attrs if attr.key not in primary]
