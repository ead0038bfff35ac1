"""Repository for categories."""

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.models.category import Category
from app.models.product import Product


class CategoryRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, id_cat: int) -> Category | None:
        return self.db.get(Category, id_cat)

    def find_all_with_counts(self) -> list[tuple[Category, int]]:
        """Every category with the number of products that reference it, by name."""
        count = func.count(Product.id_producto)
        stmt = (
            select(Category, count)
            .outerjoin(Product, Product.id_categoria == Category.id_cat)
            .group_by(Category.id_cat, Category.nombre)
            .order_by(Category.nombre)
        )
        return [(row[0], int(row[1])) for row in self.db.execute(stmt).all()]

    def name_exists(self, nombre: str, exclude_id: int | None = None) -> bool:
        stmt = select(Category.id_cat).where(func.lower(Category.nombre) == nombre.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(Category.id_cat != exclude_id)
        return self.db.execute(stmt).first() is not None

    def count_products(self, id_cat: int) -> int:
        stmt = select(func.count(Product.id_producto)).where(Product.id_categoria == id_cat)
        return int(self.db.execute(stmt).scalar_one())

    def create(self, nombre: str) -> Category:
        category = Category(nombre=nombre)
        self.db.add(category)
        self.db.flush()
        return category

    def delete(self, id_cat: int) -> bool:
        result = self.db.execute(delete(Category).where(Category.id_cat == id_cat))
        return (result.rowcount or 0) > 0
