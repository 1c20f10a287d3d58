from framework.repository.unit_of_work import UnitOfWork
from .repository import CategoryRepository, ProductRepository


class CatalogUnitOfWork(UnitOfWork):
    """Unit of work exposing the catalog repositories."""

    @property
    def categories(self) -> CategoryRepository:
        return self.get_repository(CategoryRepository)

    @property
    def products(self) -> ProductRepository:
        return self.get_repository(ProductRepository)
