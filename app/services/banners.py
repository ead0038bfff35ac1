"""Home-page banners: each row is a single image URL."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.errors import NotFoundError, ValidationError
from app.core.validation import clean_text, is_http_url
from app.models.banner import Banner
from app.repositories.banners import BannerRepository

logger = logging.getLogger(__name__)


def banner_to_dict(banner: Banner) -> dict[str, Any]:
    return {
        "id_banner": banner.id_banner,
        "banner": banner.banner,
        "fecha_creacion": banner.fecha_creacion,
    }


def _check_url(value: Any) -> str:
    url = clean_text(value)
    if not url:
        raise ValidationError("The banner URL is required.")
    if not is_http_url(url):
        raise ValidationError("Invalid banner URL.")
    return url


class BannerService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.banners = BannerRepository(db)

    def list_banners(self) -> list[dict[str, Any]]:
        return [banner_to_dict(b) for b in self.banners.find_all()]

    def get_banner(self, id_banner: int) -> dict[str, Any]:
        banner = self.banners.find_by_id(id_banner)
        if banner is None:
            raise NotFoundError(f"Banner {id_banner} not found.")
        return banner_to_dict(banner)

    def create_banner(self, url: Any) -> dict[str, Any]:
        checked = _check_url(url)
        with transaction(self.db):
            banner = self.banners.create(checked)
        self.db.refresh(banner)
        logger.info("Banner created", extra={"id_banner": banner.id_banner})
        return banner_to_dict(banner)

    def update_banner(self, id_banner: int, url: Any) -> dict[str, Any]:
        banner = self.banners.find_by_id(id_banner)
        if banner is None:
            raise NotFoundError(f"Banner {id_banner} not found.")
        checked = _check_url(url)
        with transaction(self.db):
            banner.banner = checked
            self.db.flush()
        return banner_to_dict(banner)

    def delete_banner(self, id_banner: int) -> None:
        with transaction(self.db):
            deleted = self.banners.delete(id_banner)
        if not deleted:
            raise NotFoundError(f"Banner {id_banner} not found.")
        logger.info("Banner deleted", extra={"id_banner": id_banner})
