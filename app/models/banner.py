"""ORM model for home-page banners."""

from sqlalchemy import Column, DateTime, Integer, String, func

from app.models.base import Base


class Banner(Base):
    __tablename__ = "banners"

    id_banner = Column(Integer, primary_key=True, autoincrement=True)
    banner = Column(String(1024), nullable=False)
    fecha_creacion = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
