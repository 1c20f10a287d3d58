"""Unit of Work: memoization, isolation, atomic commit and disposal."""
import pytest
from decimal import Decimal
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from apps.catalog.models import Category, Product
from apps.catalog.repository import CategoryRepository
from apps.catalog.unit_of_work import CatalogUnitOfWork
from framework.repository.exceptions import InvalidStateError, PersistenceError
from framework.repository.unit_of_work import UnitOfWork, UnitOfWorkState


async def category_names(unit: CatalogUnitOfWork) -> list:
    return [c.name async for c in unit.categories.get()]


class TestRepositoryAccess:

    def test_session_is_required(self):
        with pytest.raises(ValueError):
            UnitOfWork()

    @pytest.mark.asyncio
    async def test_repositories_are_memoized(self, uow: CatalogUnitOfWork):
        assert uow.categories is uow.categories
        assert uow.products is uow.products
        assert uow.get_repository(CategoryRepository) is uow.categories

    @pytest.mark.asyncio
    async def test_repositories_share_the_unit_session(self, uow: CatalogUnitOfWork):
        assert uow.categories.session is uow.session
        assert uow.products.session is uow.session

    @pytest.mark.asyncio
    async def test_different_units_get_different_repositories(self, uow: CatalogUnitOfWork, new_uow):
        other = new_uow()
        assert other.categories is not uow.categories
        assert other.categories.session is not uow.categories.session

    @pytest.mark.asyncio
    async def test_staged_changes_not_shared_between_units(self, uow: CatalogUnitOfWork, new_uow):
        await uow.categories.add(Category(name="Books", image_url="books.jpg"))

        assert await category_names(new_uow()) == []


class TestCommit:

    @pytest.mark.asyncio
    async def test_add_then_commit_is_visible_everywhere(self, uow: CatalogUnitOfWork, new_uow):
        await uow.categories.add(Category(name="Books", image_url="books.jpg"))
        await uow.commit()

        fresh = new_uow()
        categories = [c async for c in fresh.categories.get()]
        assert [c.name for c in categories] == ["Books"]
        assert categories[0].id is not None
        assert uow.state is UnitOfWorkState.COMMITTED

    @pytest.mark.asyncio
    async def test_commit_can_be_repeated(self, uow: CatalogUnitOfWork, new_uow):
        await uow.categories.add(Category(name="First", image_url="1.jpg"))
        await uow.commit()
        await uow.categories.add(Category(name="Second", image_url="2.jpg"))
        await uow.commit()

        assert sorted(await category_names(new_uow())) == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_writes_across_repositories_commit_together(self, uow: CatalogUnitOfWork, new_uow):
        category = await uow.categories.add(Category(name="Snacks", image_url="snacks.jpg"))
        await uow.flush()
        await uow.products.add(Product(
            name="Chips", description="Salted chips", price=Decimal("3.20"),
            image_url="chips.jpg", category_id=category.id,
        ))
        await uow.commit()

        fresh = new_uow()
        assert await fresh.categories.count() == 1
        assert await fresh.products.count() == 1

    @pytest.mark.asyncio
    async def test_constraint_violation_rolls_back_everything(self, uow: CatalogUnitOfWork, new_uow):
        await uow.categories.add(Category(name="Books", image_url="books.jpg"))
        # name is NOT NULL in the store
        await uow.products.add(Product(
            name=None, description="broken", price=Decimal("1.00"),
            image_url="x.jpg", category_id=1,
        ))

        with pytest.raises(PersistenceError):
            await uow.commit()

        assert await category_names(new_uow()) == []

    @pytest.mark.asyncio
    async def test_store_failure_during_commit(self, uow: CatalogUnitOfWork, new_uow):
        await uow.categories.add(Category(name="Books", image_url="books.jpg"))

        def connection_lost(session, flush_context):
            raise OperationalError("COMMIT", {}, Exception("connection lost"))

        event.listen(uow.session.sync_session, "after_flush", connection_lost)

        with pytest.raises(PersistenceError) as exc_info:
            await uow.commit()

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert await category_names(new_uow()) == []

    @pytest.mark.asyncio
    async def test_unit_stays_usable_after_failed_commit(self, uow: CatalogUnitOfWork, new_uow):
        await uow.categories.update(Category(id=404, name="Ghost", image_url="g.jpg"))
        with pytest.raises(PersistenceError):
            await uow.commit()

        await uow.categories.add(Category(name="Books", image_url="books.jpg"))
        await uow.commit()

        assert await category_names(new_uow()) == ["Books"]


class TestDispose:

    @pytest.mark.asyncio
    async def test_operations_after_dispose_fail(self, uow: CatalogUnitOfWork):
        categories = uow.categories
        await uow.dispose()

        assert uow.state is UnitOfWorkState.DISPOSED
        with pytest.raises(InvalidStateError):
            uow.categories
        with pytest.raises(InvalidStateError):
            await uow.commit()
        with pytest.raises(InvalidStateError):
            await uow.flush()
        with pytest.raises(InvalidStateError):
            await uow.rollback()
        with pytest.raises(InvalidStateError):
            await categories.get_by_id(1)
        with pytest.raises(InvalidStateError):
            categories.get()
        with pytest.raises(InvalidStateError):
            await categories.add(Category(name="Late", image_url="late.jpg"))
        with pytest.raises(InvalidStateError):
            await categories.take(1)

    @pytest.mark.asyncio
    async def test_dispose_discards_uncommitted_work(self, uow: CatalogUnitOfWork, new_uow):
        await uow.categories.add(Category(name="Books", image_url="books.jpg"))
        await uow.flush()

        await uow.dispose()
        await uow.dispose()  # idempotent

        assert await category_names(new_uow()) == []

    @pytest.mark.asyncio
    async def test_context_manager_disposes_without_commit(self, session_factory, new_uow):
        async with CatalogUnitOfWork(session=session_factory()) as unit:
            await unit.categories.add(Category(name="Books", image_url="books.jpg"))

        assert unit.is_disposed
        assert await category_names(new_uow()) == []
