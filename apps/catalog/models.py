from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from sqlmodel import SQLModel, Field, Relationship

class Category(SQLModel, table=True):
    __tablename__ = "categories"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=80, index=True)
    image_url: str = Field(max_length=300)

    # Deleting a category removes its products
    products: List["Product"] = Relationship(
        back_populates="category",
        sa_relationship_kwargs={"cascade": "save-update, merge, delete"},
    )

class Product(SQLModel, table=True):
    __tablename__ = "products"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=80)
    description: str = Field(max_length=300)
    price: Decimal = Field(max_digits=10, decimal_places=2)
    image_url: str = Field(max_length=300)
    stock: float = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    category_id: int = Field(foreign_key="categories.id", ondelete="CASCADE", index=True)

    category: Optional[Category] = Relationship(back_populates="products")
