"""ORM model for catalog products."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from app.models.base import Base


class Product(Base):
    """
    Catalog product.

    imagen_principal is a JSON list of up to three image URLs; video_url is a
    single optional URL. Deleting a category that still has products is
    refused by the foreign key.
    """

    __tablename__ = "productos"

    id_producto = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(255), nullable=False)
    descripcion = Column(Text, nullable=True)
    id_categoria = Column(
        Integer,
        ForeignKey("categorias.id_cat", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    stock = Column(Integer, nullable=False, default=0)
    precio = Column(Numeric(12, 2), nullable=False, default=0)
    marca = Column(String(100), nullable=True)
    modelo = Column(String(100), nullable=True)
    caracteristicas = Column(Text, nullable=True)
    codigo_interno = Column(String(100), nullable=True)
    imagen_principal = Column(JSON, nullable=False, default=list)
    video_url = Column(String(1024), nullable=True)
    favorito = Column(Boolean, nullable=False, default=False)
    activo = Column(Boolean, nullable=False, default=True)
    fecha_creacion = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    fecha_actualizacion = Column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=func.now(),
    )

    categoria = relationship("Category", lazy="joined")
