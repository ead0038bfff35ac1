"""Repository for products: filtered, sorted and paginated listing plus CRUD."""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.orm import Session

from app.models.product import Product

# Columns the listing may be sorted by.
SORTABLE_COLUMNS = {
    "fecha_creacion": Product.fecha_creacion,
    "precio": Product.precio,
    "id_producto": Product.id_producto,
    "nombre": Product.nombre,
}


@dataclass
class ProductFilters:
    category: int | None = None
    search: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    in_stock: bool = False
    brand: str | None = None
    model: str | None = None


class ProductRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, id_producto: int) -> Product | None:
        return self.db.get(Product, id_producto)

    def _apply_filters(self, stmt: Select, filters: ProductFilters) -> Select:
        if filters.category is not None:
            stmt = stmt.where(Product.id_categoria == filters.category)
        if filters.search:
            pattern = f"%{filters.search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Product.nombre).like(pattern),
                    func.lower(func.coalesce(Product.descripcion, "")).like(pattern),
                )
            )
        if filters.min_price is not None:
            stmt = stmt.where(Product.precio >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(Product.precio <= filters.max_price)
        if filters.in_stock:
            stmt = stmt.where(Product.stock > 0)
        if filters.brand:
            stmt = stmt.where(func.lower(Product.marca) == filters.brand.lower())
        if filters.model:
            stmt = stmt.where(func.lower(Product.modelo) == filters.model.lower())
        return stmt

    def search(
        self,
        filters: ProductFilters,
        sort_by: str = "fecha_creacion",
        sort_dir: str = "DESC",
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """Return (page of products, total matching rows)."""
        count_stmt = self._apply_filters(select(func.count(Product.id_producto)), filters)
        total = int(self.db.execute(count_stmt).scalar_one())

        column = SORTABLE_COLUMNS.get(sort_by, Product.fecha_creacion)
        order = column.asc() if sort_dir == "ASC" else column.desc()
        tiebreak = Product.id_producto.asc() if sort_dir == "ASC" else Product.id_producto.desc()
        stmt = self._apply_filters(select(Product), filters).order_by(order, tiebreak)
        if limit is not None:
            stmt = stmt.limit(limit).offset(offset)
        items = list(self.db.execute(stmt).unique().scalars())
        return items, total

    def create(self, product: Product) -> Product:
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, id_producto: int) -> bool:
        result = self.db.execute(delete(Product).where(Product.id_producto == id_producto))
        return (result.rowcount or 0) > 0
