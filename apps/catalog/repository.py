"""Catalog repositories: extra read queries on top of the generic repository."""

from typing import List, Optional
from sqlalchemy.orm import selectinload
from sqlmodel import select
from framework.config import settings
from framework.repository.base import BaseRepository
from .models import Category, Product


def bounded(limit: Optional[int]) -> int:
    """Clamp a requested page size to the configured maximum."""
    if limit is None or limit <= 0:
        return settings.CATALOG_PAGE_SIZE
    return min(limit, settings.CATALOG_MAX_PAGE_SIZE)


class CategoryRepository(BaseRepository[Category]):
    """Category repository."""

    def __init__(self, session, guard=None):
        super().__init__(session, Category, guard=guard)

    async def get_by_name(self, name: str) -> Optional[Category]:
        """Find category by name."""
        return await self.find_one(name=name)

    async def get_with_products(self, limit: Optional[int] = None) -> List[Category]:
        """Categories with their products loaded, lowest ids first.

        Products are loaded one level deep; their ``category`` back-reference
        is not expanded again.
        """
        self._check_open()
        statement = (
            select(Category)
            .options(selectinload(Category.products))
            .order_by(Category.id)
            .limit(bounded(limit))
        )
        return await self._all(statement)

    async def get_having_products(self, limit: Optional[int] = None) -> List[Category]:
        """Only categories that own at least one product."""
        self._check_open()
        statement = (
            select(Category)
            .where(Category.products.any())
            .order_by(Category.id)
            .limit(bounded(limit))
        )
        return await self._all(statement)


class ProductRepository(BaseRepository[Product]):
    """Product repository."""

    def __init__(self, session, guard=None):
        super().__init__(session, Product, guard=guard)

    async def get_by_price(self, limit: Optional[int] = None) -> List[Product]:
        """Products ordered by ascending price."""
        self._check_open()
        statement = select(Product).order_by(Product.price, Product.id).limit(bounded(limit))
        return await self._all(statement)

    async def get_with_category(self, limit: Optional[int] = None) -> List[Product]:
        """Products with their category loaded."""
        self._check_open()
        statement = (
            select(Product)
            .options(selectinload(Product.category))
            .order_by(Product.id)
            .limit(bounded(limit))
        )
        return await self._all(statement)

    async def get_by_category(self, category_id: int, limit: Optional[int] = None) -> List[Product]:
        """Products of one category."""
        self._check_open()
        statement = (
            select(Product)
            .where(Product.category_id == category_id)
            .order_by(Product.id)
            .limit(bounded(limit))
        )
        return await self._all(statement)
