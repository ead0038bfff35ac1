"""ORM model for product categories."""

from sqlalchemy import Column, Integer, String

from app.models.base import Base


class Category(Base):
    __tablename__ = "categorias"

    id_cat = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(150), nullable=False, unique=True)
