"""Product catalog: validation, filtered listing and partial updates with image/video handling."""

import json
import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.validation import clean_text, is_http_url
from app.models.product import Product
from app.repositories.categories import CategoryRepository
from app.repositories.products import SORTABLE_COLUMNS, ProductFilters, ProductRepository

logger = logging.getLogger(__name__)

MAX_IMAGES = 3
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100
NAME_MAX_LEN = 255
# precio is NUMERIC(12, 2): ten integer digits.
MAX_PRICE = Decimal(10) ** 10

# Optional free-text columns and their max lengths (None = unbounded text).
_TEXT_FIELDS: dict[str, int | None] = {
    "descripcion": None,
    "marca": 100,
    "modelo": 100,
    "caracteristicas": None,
    "codigo_interno": 100,
}

_TRUE = {"1", "true", "yes", "on", "si", "sí"}
_FALSE = {"0", "false", "no", "off", ""}


def product_to_dict(product: Product) -> dict[str, Any]:
    return {
        "id_producto": product.id_producto,
        "nombre": product.nombre,
        "descripcion": product.descripcion,
        "id_categoria": product.id_categoria,
        "categoria": product.categoria.nombre if product.categoria is not None else None,
        "stock": product.stock,
        "precio": float(product.precio) if product.precio is not None else 0.0,
        "marca": product.marca,
        "modelo": product.modelo,
        "caracteristicas": product.caracteristicas,
        "codigo_interno": product.codigo_interno,
        "imagen_principal": list(product.imagen_principal or []),
        "video_url": product.video_url,
        "favorito": bool(product.favorito),
        "activo": bool(product.activo),
        "fecha_creacion": product.fecha_creacion,
        "fecha_actualizacion": product.fecha_actualizacion,
    }


def to_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = clean_text(value).lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"{field} must be a boolean.")


def to_int(value: Any, field: str, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer.")
    try:
        number = int(clean_text(value)) if not isinstance(value, int) else value
    except ValueError as e:
        raise ValidationError(f"{field} must be an integer.") from e
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be greater than or equal to {minimum}.")
    return number


def to_price(value: Any, field: str = "precio") -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number.")
    try:
        number = Decimal(clean_text(value).replace(",", "."))
    except InvalidOperation as e:
        raise ValidationError(f"{field} must be a number.") from e
    if not number.is_finite() or number < 0:
        raise ValidationError(f"{field} must be greater than or equal to 0.")
    if number >= MAX_PRICE:
        raise ValidationError(f"{field} must be less than {MAX_PRICE}.")
    price = number.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if price >= MAX_PRICE:
        raise ValidationError(f"{field} must be less than {MAX_PRICE}.")
    return price


def to_url_list(value: Any, field: str) -> list[str]:
    """Accept a list, a JSON array string or a comma-separated string of URLs."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValidationError(f"{field} must be a list of URLs.") from e
        else:
            value = [part for part in text.split(",")]
    if not isinstance(value, list):
        raise ValidationError(f"{field} must be a list of URLs.")
    return [clean_text(v) for v in value if clean_text(v)]


def normalize_images(urls: list[str]) -> list[str]:
    """Keep http/https URLs only, drop duplicates (order kept), cap at MAX_IMAGES."""
    seen: list[str] = []
    for url in urls:
        if not is_http_url(url):
            raise ValidationError(f"Invalid image URL: {url}")
        if url not in seen:
            seen.append(url)
    if len(seen) > MAX_IMAGES:
        raise ValidationError(f"A product can have at most {MAX_IMAGES} images.")
    return seen


class ProductService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.products = ProductRepository(db)
        self.categories = CategoryRepository(db)

    def _get(self, id_producto: int) -> Product:
        product = self.products.find_by_id(id_producto)
        if product is None:
            raise NotFoundError(f"Product {id_producto} not found.")
        return product

    def _check_category(self, value: Any) -> int:
        id_cat = to_int(value, "id_categoria")
        if id_cat <= 0:
            raise ValidationError("id_categoria must be a positive integer.")
        if self.categories.find_by_id(id_cat) is None:
            raise ValidationError(f"Category {id_cat} does not exist.")
        return id_cat

    def _common_fields(self, data: dict[str, Any]) -> dict[str, Any]:
        """Validate the fields shared by create and update (only keys present in data)."""
        fields: dict[str, Any] = {}
        if "nombre" in data:
            nombre = clean_text(data["nombre"])
            if not nombre:
                raise ValidationError("Product name is required.")
            if len(nombre) > NAME_MAX_LEN:
                raise ValidationError(f"Product name must be at most {NAME_MAX_LEN} characters.")
            fields["nombre"] = nombre
        for name, max_len in _TEXT_FIELDS.items():
            if name in data:
                text = clean_text(data[name]) or None
                if text and max_len is not None and len(text) > max_len:
                    raise ValidationError(f"{name} must be at most {max_len} characters.")
                fields[name] = text
        if "id_categoria" in data:
            fields["id_categoria"] = self._check_category(data["id_categoria"])
        if "stock" in data:
            fields["stock"] = to_int(data["stock"], "stock", minimum=0)
        if "precio" in data:
            fields["precio"] = to_price(data["precio"])
        if "favorito" in data:
            fields["favorito"] = to_bool(data["favorito"], "favorito")
        if "activo" in data:
            fields["activo"] = to_bool(data["activo"], "activo")
        if "video_url" in data:
            video = clean_text(data["video_url"]) or None
            if video is not None and not is_http_url(video):
                raise ValidationError("video_url must be an http or https URL.")
            fields["video_url"] = video
        return fields

    def create_product(
        self,
        data: dict[str, Any],
        uploaded_images: list[str] | None = None,
        uploaded_video: str | None = None,
    ) -> dict[str, Any]:
        if not clean_text(data.get("nombre")):
            raise ValidationError("Product name is required.")
        if data.get("id_categoria") in (None, ""):
            raise ValidationError("id_categoria is required.")
        fields = self._common_fields(data)
        images = to_url_list(data.get("imagen_principal"), "imagen_principal") + list(uploaded_images or [])
        fields["imagen_principal"] = normalize_images(images)
        if uploaded_video:
            fields["video_url"] = uploaded_video
        try:
            with transaction(self.db):
                product = self.products.create(Product(**fields))
        except IntegrityError as e:
            raise ConflictError("The product conflicts with existing data.") from e
        self.db.refresh(product)
        logger.info("Product created", extra={"id_producto": product.id_producto})
        return product_to_dict(product)

    def get_product(self, id_producto: int) -> dict[str, Any]:
        return product_to_dict(self._get(id_producto))

    def list_products(self, query: dict[str, Any]) -> dict[str, Any]:
        """Filtered listing with pagination metadata."""
        filters = ProductFilters()
        applied: dict[str, Any] = {}
        if clean_text(query.get("category")):
            filters.category = to_int(query["category"], "category", minimum=1)
            applied["category"] = filters.category
        if clean_text(query.get("search")):
            filters.search = clean_text(query["search"])
            applied["search"] = filters.search
        if clean_text(query.get("min_price")):
            filters.min_price = to_price(query["min_price"], "min_price")
            applied["min_price"] = float(filters.min_price)
        if clean_text(query.get("max_price")):
            filters.max_price = to_price(query["max_price"], "max_price")
            applied["max_price"] = float(filters.max_price)
        if clean_text(query.get("in_stock")) and to_bool(query["in_stock"], "in_stock"):
            filters.in_stock = True
            applied["in_stock"] = True
        if clean_text(query.get("brand")):
            filters.brand = clean_text(query["brand"])
            applied["brand"] = filters.brand
        if clean_text(query.get("model")):
            filters.model = clean_text(query["model"])
            applied["model"] = filters.model

        sort_by = clean_text(query.get("sort_by")) or "fecha_creacion"
        if sort_by not in SORTABLE_COLUMNS:
            sort_by = "fecha_creacion"
        sort_dir = "ASC" if clean_text(query.get("sort_dir")).upper() == "ASC" else "DESC"
        applied["sort_by"] = sort_by
        applied["sort_dir"] = sort_dir

        raw_per_page = clean_text(query.get("per_page")).lower()
        if raw_per_page in ("all", "0"):
            per_page: int | None = None
        elif raw_per_page:
            per_page = min(max(to_int(raw_per_page, "per_page"), 1), MAX_PER_PAGE)
        else:
            per_page = DEFAULT_PER_PAGE
        page = to_int(query["page"], "page") if clean_text(query.get("page")) else 1
        page = max(page, 1) if per_page is not None else 1

        offset = (page - 1) * per_page if per_page is not None else 0
        items, total = self.products.search(filters, sort_by, sort_dir, per_page, offset)
        total_pages = (math.ceil(total / per_page) if per_page else (1 if total else 0))
        return {
            "items": [product_to_dict(p) for p in items],
            "pagination": {
                "page": page,
                "per_page": per_page if per_page is not None else total,
                "total": total,
                "total_pages": total_pages,
            },
            "filters_applied": applied,
        }

    def update_product(
        self,
        id_producto: int,
        data: dict[str, Any],
        uploaded_images: list[str] | None = None,
        uploaded_video: str | None = None,
    ) -> dict[str, Any]:
        """
        Partial update.

        Image handling: imagen_principal (when given) or replace_images=true with
        uploads replaces the list; keep_images keeps only the listed URLs;
        remove_images drops the listed URLs; new uploads are appended.
        remove_video=true clears video_url unless a new video was uploaded.
        """
        product = self._get(id_producto)
        fields = self._common_fields(data)

        images = list(product.imagen_principal or [])
        replace = to_bool(data["replace_images"], "replace_images") if "replace_images" in data else False
        if "imagen_principal" in data:
            images = to_url_list(data["imagen_principal"], "imagen_principal")
        elif replace and uploaded_images:
            images = []
        if "keep_images" in data:
            keep = set(to_url_list(data["keep_images"], "keep_images"))
            images = [url for url in images if url in keep]
        if "remove_images" in data:
            remove = set(to_url_list(data["remove_images"], "remove_images"))
            images = [url for url in images if url not in remove]
        images.extend(uploaded_images or [])
        new_images = normalize_images(images)
        if new_images != list(product.imagen_principal or []):
            fields["imagen_principal"] = new_images

        if uploaded_video:
            fields["video_url"] = uploaded_video
        elif "remove_video" in data and to_bool(data["remove_video"], "remove_video"):
            fields["video_url"] = None

        if not fields:
            raise ValidationError("No fields to update.")
        try:
            with transaction(self.db):
                for name, value in fields.items():
                    setattr(product, name, value)
                self.db.flush()
        except IntegrityError as e:
            raise ConflictError("The product conflicts with existing data.") from e
        self.db.refresh(product)
        logger.info("Product updated", extra={"id_producto": id_producto, "fields": sorted(fields)})
        return product_to_dict(product)

    def category_and_name(self, id_producto: int) -> tuple[str, str]:
        """Names used to build the storage folder for a product's media."""
        product = self._get(id_producto)
        category = product.categoria.nombre if product.categoria is not None else ""
        return category, product.nombre

    def delete_product(self, id_producto: int) -> None:
        with transaction(self.db):
            deleted = self.products.delete(id_producto)
        if not deleted:
            raise NotFoundError(f"Product {id_producto} not found.")
        logger.info("Product deleted", extra={"id_producto": id_producto})
