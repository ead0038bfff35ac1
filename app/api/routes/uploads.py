"""Attach uploaded images or a video to an existing product."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_media_storage, get_product_service
from app.api.forms import read_payload
from app.api.guard import AuthContext, require_any_of
from app.api.routes.products import store_media, stored_urls
from app.core.errors import ValidationError
from app.core.responses import ok
from app.core.roles import Role
from app.core.validation import parse_positive_id
from app.services.media import MediaStorage
from app.services.products import ProductService

router = APIRouter()

CanUploadMedia = Annotated[
    AuthContext,
    Depends(require_any_of(Role.SUPERADMIN, Role.ADMIN, Role.DEV, Role.SELLER)),
]


@router.post("/productos/{id_producto}")
async def upload_product_media(
    id_producto: str,
    request: Request,
    _ctx: CanUploadMedia,
    service: Annotated[ProductService, Depends(get_product_service)],
    media: Annotated[MediaStorage, Depends(get_media_storage)],
) -> JSONResponse:
    """
    Multipart upload: images under imagenes/images/image (max 3) and a video
    under video/video_file. Images are appended unless replace_images=true.
    """
    pid = parse_positive_id(id_producto)
    category, name = service.category_and_name(pid)
    fields, files = await read_payload(request)
    if not files:
        raise ValidationError("No files were uploaded.")
    image_urls, video_url = store_media(media, files, category, name)
    options = {k: v for k, v in fields.items() if k == "replace_images"}
    try:
        product = service.update_product(pid, options, uploaded_images=image_urls, uploaded_video=video_url)
    except Exception:
        media.discard(stored_urls(image_urls, video_url))
        raise
    return ok(product, "producto")
