"""SQLAlchemy ORM models."""

from app.models.banner import Banner
from app.models.base import Base
from app.models.category import Category
from app.models.product import Product
from app.models.revoked_token import RevokedToken
from app.models.user import User

__all__ = ["Banner", "Base", "Category", "Product", "RevokedToken", "User"]
