"""Category management with case-insensitive unique names."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.validation import clean_text
from app.models.category import Category
from app.repositories.categories import CategoryRepository

logger = logging.getLogger(__name__)

NAME_MAX_LEN = 150


def category_to_dict(category: Category, product_count: int | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {"id_cat": category.id_cat, "nombre": category.nombre}
    if product_count is not None:
        out["total_productos"] = product_count
    return out


def _check_name(value: Any) -> str:
    nombre = clean_text(value)
    if not nombre:
        raise ValidationError("Category name is required.")
    if len(nombre) > NAME_MAX_LEN:
        raise ValidationError(f"Category name must be at most {NAME_MAX_LEN} characters.")
    return nombre


class CategoryService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.categories = CategoryRepository(db)

    def _get(self, id_cat: int) -> Category:
        category = self.categories.find_by_id(id_cat)
        if category is None:
            raise NotFoundError(f"Category {id_cat} not found.")
        return category

    def list_categories(self) -> list[dict[str, Any]]:
        return [category_to_dict(c, n) for c, n in self.categories.find_all_with_counts()]

    def get_category(self, id_cat: int) -> dict[str, Any]:
        category = self._get(id_cat)
        return category_to_dict(category, self.categories.count_products(id_cat))

    def create_category(self, nombre: Any) -> dict[str, Any]:
        name = _check_name(nombre)
        if self.categories.name_exists(name):
            raise ConflictError(f"A category named '{name}' already exists.")
        try:
            with transaction(self.db):
                category = self.categories.create(name)
        except IntegrityError as e:
            raise ConflictError(f"A category named '{name}' already exists.") from e
        logger.info("Category created", extra={"id_cat": category.id_cat})
        return category_to_dict(category, 0)

    def update_category(self, id_cat: int, nombre: Any) -> dict[str, Any]:
        category = self._get(id_cat)
        name = _check_name(nombre)
        if name.lower() != category.nombre.lower() and self.categories.name_exists(name, exclude_id=id_cat):
            raise ConflictError(f"A category named '{name}' already exists.")
        try:
            with transaction(self.db):
                category.nombre = name
                self.db.flush()
        except IntegrityError as e:
            raise ConflictError(f"A category named '{name}' already exists.") from e
        return category_to_dict(category)

    def delete_category(self, id_cat: int) -> None:
        self._get(id_cat)
        in_use = "The category cannot be deleted because it has associated products."
        if self.categories.count_products(id_cat) > 0:
            raise ConflictError(in_use)
        try:
            with transaction(self.db):
                self.categories.delete(id_cat)
        except IntegrityError as e:
            raise ConflictError(in_use) from e
        logger.info("Category deleted", extra={"id_cat": id_cat})
