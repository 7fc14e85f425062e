"""
Declarative base shared by every ORM model.

Importing the models here keeps Base.metadata complete for
create_all() in tests and for Alembic autogeneration.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def import_models() -> None:
    """Register all model modules on Base.metadata."""
    from medisage.models import user, history  # noqa: F401
