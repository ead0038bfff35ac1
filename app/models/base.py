"""SQLAlchemy declarative Base shared by the users, catalog and revocation tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models; Base.metadata drives Alembic and test schemas."""

    pass
