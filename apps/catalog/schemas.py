"""
Request/response shapes for the catalog API.

Nested shapes never include the back-reference: a category lists its
products, but those products do not list their category again.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from .models import Category, Product


class CategoryIn(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    image_url: str = Field(max_length=300)

    def to_entity(self, category_id: Optional[int] = None) -> Category:
        return Category(id=category_id, name=self.name, image_url=self.image_url)


class CategoryUpdate(CategoryIn):
    id: int


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    image_url: str


class ProductIn(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    description: str = Field(max_length=300)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    image_url: str = Field(max_length=300)
    stock: float = Field(default=0, ge=0)
    category_id: int

    def to_entity(self, product_id: Optional[int] = None) -> Product:
        return Product(id=product_id, **self.model_dump(exclude={"id"}))


class ProductUpdate(ProductIn):
    id: int


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    price: Decimal
    image_url: str
    stock: float
    created_at: datetime
    category_id: int


class CategoryWithProducts(CategoryRead):
    products: List[ProductRead] = []


class ProductWithCategory(ProductRead):
    category: Optional[CategoryRead] = None
