"""
Model registration for migrations: import all models that should be migrated by Alembic here.
When adding/removing apps, add/remove the corresponding imports here; no need to change alembic/env.py.
"""
from apps.catalog.models import Category, Product

__all__ = ["Category", "Product"]
