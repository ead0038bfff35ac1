"""Product endpoints. Listing is public; writes accept JSON or multipart with media files."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import get_media_storage, get_product_service
from app.api.forms import collect_files, read_payload
from app.api.guard import AuthContext, allow_all_roles, require_any_of
from app.core.responses import ok
from app.core.roles import Role
from app.core.validation import clean_text, parse_positive_id
from app.services.media import IMAGE_FIELDS, VIDEO_FIELDS, IncomingFile, MediaStorage
from app.services.products import ProductService

router = APIRouter()

ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
MediaDep = Annotated[MediaStorage, Depends(get_media_storage)]

CanViewProduct = Annotated[AuthContext, Depends(allow_all_roles())]
CanEditProducts = Annotated[
    AuthContext,
    Depends(require_any_of(Role.SUPERADMIN, Role.ADMIN, Role.DEV, Role.SELLER)),
]
CanDeleteProducts = Annotated[AuthContext, Depends(require_any_of(Role.SUPERADMIN, Role.ADMIN, Role.DEV))]


def store_media(
    media: MediaStorage,
    files: dict[str, list[IncomingFile]],
    category: str,
    product: str,
) -> tuple[list[str], str | None]:
    """Persist uploaded images/video and return their public URLs."""
    images = collect_files(files, IMAGE_FIELDS)
    videos = collect_files(files, VIDEO_FIELDS)
    image_urls = media.save_product_images(images, category, product) if images else []
    try:
        video_url = media.save_product_video(videos[0], category, product) if videos else None
    except Exception:
        media.discard(image_urls)
        raise
    return image_urls, video_url


def stored_urls(image_urls: list[str], video_url: str | None) -> list[str]:
    return image_urls + ([video_url] if video_url else [])


@router.get("")
def list_products(request: Request, service: ProductServiceDep) -> JSONResponse:
    """
    List products. Query: category, search, min_price, max_price, in_stock,
    brand, model, sort_by, sort_dir, page, per_page ("all" or 0 disables paging).
    """
    return ok(service.list_products(dict(request.query_params)), "productos")


@router.get("/{id_producto}")
def get_product(id_producto: str, _ctx: CanViewProduct, service: ProductServiceDep) -> JSONResponse:
    return ok(service.get_product(parse_positive_id(id_producto)), "producto")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: Request,
    _ctx: CanEditProducts,
    service: ProductServiceDep,
    media: MediaDep,
) -> JSONResponse:
    fields, files = await read_payload(request)
    image_urls: list[str] = []
    video_url: str | None = None
    if files:
        category = ""
        raw_cat: Any = fields.get("id_categoria")
        if clean_text(raw_cat).isdigit():
            found = service.categories.find_by_id(int(clean_text(raw_cat)))
            category = found.nombre if found is not None else ""
        image_urls, video_url = store_media(media, files, category, clean_text(fields.get("nombre")))
    try:
        product = service.create_product(fields, uploaded_images=image_urls, uploaded_video=video_url)
    except Exception:
        media.discard(stored_urls(image_urls, video_url))
        raise
    return ok(product, "producto", status.HTTP_201_CREATED)


@router.put("/{id_producto}")
async def update_product(
    id_producto: str,
    request: Request,
    _ctx: CanEditProducts,
    service: ProductServiceDep,
    media: MediaDep,
) -> JSONResponse:
    """Partial update; supports replace_images, keep_images, remove_images and remove_video."""
    pid = parse_positive_id(id_producto)
    fields, files = await read_payload(request)
    image_urls: list[str] = []
    video_url: str | None = None
    if files:
        category, name = service.category_and_name(pid)
        image_urls, video_url = store_media(media, files, category, name)
    try:
        product = service.update_product(pid, fields, uploaded_images=image_urls, uploaded_video=video_url)
    except Exception:
        media.discard(stored_urls(image_urls, video_url))
        raise
    return ok(product, "producto")


@router.delete("/{id_producto}")
def delete_product(id_producto: str, _ctx: CanDeleteProducts, service: ProductServiceDep) -> JSONResponse:
    pid = parse_positive_id(id_producto)
    service.delete_product(pid)
    return ok(f"Product {pid} deleted.", "message")
