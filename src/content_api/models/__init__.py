"""ORM model registry — import all models so Alembic autogenerate discovers them."""

from content_api.models.base import Base
from content_api.models.resource import Resource

__all__ = [
    "Base",
    "Resource",
]
