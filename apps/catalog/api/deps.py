from typing import AsyncGenerator
from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.database.manager import DatabaseManager
from framework.logging.logger import StructuredLogger
from ..unit_of_work import CatalogUnitOfWork


async def get_db():
    """Get database session."""
    manager = DatabaseManager.get_instance()
    async for session in manager.sql.get_session():
        yield session


async def get_uow(
    db: AsyncSession = Depends(get_db)
) -> AsyncGenerator[CatalogUnitOfWork, None]:
    """Dependency: one CatalogUnitOfWork per request, disposed when the request ends."""
    uow = CatalogUnitOfWork(session=db)
    try:
        yield uow
    finally:
        await uow.dispose()


def get_app_logger(request: Request) -> StructuredLogger:
    """Dependency: the process-wide logger built at startup."""
    return request.app.state.logger
