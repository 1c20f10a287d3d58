"""seed starter catalog

Revision ID: 002
Revises: 001
Create Date: 2026-10-17 12:30:00.000000

"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

categories = sa.table(
    'categories',
    sa.column('id', sa.Integer),
    sa.column('name', sa.String),
    sa.column('image_url', sa.String),
)

products = sa.table(
    'products',
    sa.column('id', sa.Integer),
    sa.column('name', sa.String),
    sa.column('description', sa.String),
    sa.column('price', sa.Numeric),
    sa.column('image_url', sa.String),
    sa.column('stock', sa.Float),
    sa.column('created_at', sa.DateTime),
    sa.column('category_id', sa.Integer),
)


def upgrade() -> None:
    op.bulk_insert(categories, [
        {'id': 1, 'name': 'Beverages', 'image_url': 'beverages.jpg'},
        {'id': 2, 'name': 'Snacks', 'image_url': 'snacks.jpg'},
        {'id': 3, 'name': 'Desserts', 'image_url': 'desserts.jpg'},
    ])

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    op.bulk_insert(products, [
        {'id': 1, 'name': 'Cola', 'description': 'Cola soft drink 350 ml', 'price': Decimal('5.45'),
         'image_url': 'cola.jpg', 'stock': 50, 'created_at': now, 'category_id': 1},
        {'id': 2, 'name': 'Tuna Sandwich', 'description': 'Tuna sandwich with mayonnaise', 'price': Decimal('8.50'),
         'image_url': 'tuna_sandwich.jpg', 'stock': 10, 'created_at': now, 'category_id': 2},
        {'id': 3, 'name': 'Pudding', 'description': 'Condensed milk pudding 100 g', 'price': Decimal('6.75'),
         'image_url': 'pudding.jpg', 'stock': 20, 'created_at': now, 'category_id': 3},
    ])


def downgrade() -> None:
    op.execute(products.delete().where(products.c.id.in_([1, 2, 3])))
    op.execute(categories.delete().where(categories.c.id.in_([1, 2, 3])))
