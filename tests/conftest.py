"""Test config and shared fixtures."""
import os

# Must be set before framework.config builds its settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_ENQUEUE", "false")

import pytest
from decimal import Decimal
from typing import AsyncGenerator, List
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from main import app
from apps.catalog.api.deps import get_db
from apps.catalog.models import Category, Product
from apps.catalog.unit_of_work import CatalogUnitOfWork


@pytest.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite so separate sessions use separate connections."""
    import apps.models  # noqa: F401  register all tables

    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'catalog_test.db'}",
        echo=False,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def uow(session_factory) -> AsyncGenerator[CatalogUnitOfWork, None]:
    """A unit of work on its own session, disposed after the test."""
    unit = CatalogUnitOfWork(session=session_factory())
    yield unit
    await unit.dispose()


@pytest.fixture
async def new_uow(session_factory):
    """Factory for extra units; every unit it builds is disposed after the test."""
    units: List[CatalogUnitOfWork] = []

    def _new_uow() -> CatalogUnitOfWork:
        unit = CatalogUnitOfWork(session=session_factory())
        units.append(unit)
        return unit

    yield _new_uow

    for unit in units:
        await unit.dispose()


@pytest.fixture
async def sample_category(async_session: AsyncSession) -> Category:
    """Create sample category."""
    category = Category(name="Beverages", image_url="beverages.jpg")
    async_session.add(category)
    await async_session.commit()
    await async_session.refresh(category)
    return category


@pytest.fixture
async def sample_product(async_session: AsyncSession, sample_category: Category) -> Product:
    """Create sample product."""
    product = Product(
        name="Cola",
        description="Cola soft drink 350 ml",
        price=Decimal("5.45"),
        image_url="cola.jpg",
        stock=50,
        category_id=sample_category.id,
    )
    async_session.add(product)
    await async_session.commit()
    await async_session.refresh(product)
    return product


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client; each request gets its own session like in production."""

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db

    # Unhandled errors come back as the 500 response instead of being re-raised
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def log_records():
    """Collect Loguru records emitted through the application logger."""
    records = []
    handler_id = app.state.logger.add_sink(lambda message: records.append(message.record))
    yield records
    app.state.logger.remove_sink(handler_id)
