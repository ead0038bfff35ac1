"""Banner endpoints. Listing is public; changes need a catalog-admin role."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import get_banner_service, get_media_storage
from app.api.forms import collect_files, read_payload
from app.api.guard import AuthContext, allow_all_roles, require_any_of
from app.core.responses import ok
from app.core.roles import Role
from app.core.validation import parse_positive_id
from app.services.banners import BannerService
from app.services.media import BANNER_FIELDS, MediaStorage

router = APIRouter()

BannerServiceDep = Annotated[BannerService, Depends(get_banner_service)]
MediaDep = Annotated[MediaStorage, Depends(get_media_storage)]

CanViewBanner = Annotated[AuthContext, Depends(allow_all_roles())]
CanEditBanners = Annotated[AuthContext, Depends(require_any_of(Role.SUPERADMIN, Role.ADMIN, Role.DEV))]


async def _banner_url(request: Request, media: MediaStorage) -> tuple[str | None, bool]:
    """URL from a JSON/form "banner" field, or from an uploaded image; the flag tells which."""
    fields, files = await read_payload(request)
    uploads = collect_files(files, BANNER_FIELDS)
    if uploads:
        return media.save_banner_image(uploads[0]), True
    value = fields.get("banner")
    return (value if isinstance(value, str) else None), False


@router.get("")
def list_banners(service: BannerServiceDep) -> JSONResponse:
    return ok(service.list_banners(), "banners")


@router.get("/{id_banner}")
def get_banner(id_banner: str, _ctx: CanViewBanner, service: BannerServiceDep) -> JSONResponse:
    return ok(service.get_banner(parse_positive_id(id_banner)), "banner")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_banner(
    request: Request,
    _ctx: CanEditBanners,
    service: BannerServiceDep,
    media: MediaDep,
) -> JSONResponse:
    url, uploaded = await _banner_url(request, media)
    try:
        banner = service.create_banner(url)
    except Exception:
        if uploaded:
            media.discard([url])
        raise
    return ok(banner, "banner", status.HTTP_201_CREATED)


@router.put("/{id_banner}")
async def update_banner(
    id_banner: str,
    request: Request,
    _ctx: CanEditBanners,
    service: BannerServiceDep,
    media: MediaDep,
) -> JSONResponse:
    bid = parse_positive_id(id_banner)
    service.get_banner(bid)
    url, uploaded = await _banner_url(request, media)
    try:
        banner = service.update_banner(bid, url)
    except Exception:
        if uploaded:
            media.discard([url])
        raise
    return ok(banner, "banner")


@router.delete("/{id_banner}")
def delete_banner(id_banner: str, _ctx: CanEditBanners, service: BannerServiceDep) -> JSONResponse:
    bid = parse_positive_id(id_banner)
    service.delete_banner(bid)
    return ok(f"Banner {bid} deleted.", "message")
