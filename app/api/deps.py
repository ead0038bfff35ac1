"""FastAPI dependency providers for services and their collaborators."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from app.api.guard import get_revocations
from app.core.config import settings
from app.core.database import get_db
from app.core.revocation import RevocationStore
from app.services.auth import AuthService
from app.services.banners import BannerService
from app.services.categories import CategoryService
from app.services.mailer import Mailer
from app.services.media import MediaStorage
from app.services.products import ProductService
from app.services.users import UserService

DbSession = Annotated[Session, Depends(get_db)]


def get_mailer() -> Mailer:
    return Mailer(settings)


def get_media_storage() -> MediaStorage:
    return MediaStorage(settings)


def get_auth_service(
    db: DbSession,
    revocations: Annotated[RevocationStore, Depends(get_revocations)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> AuthService:
    return AuthService(db, revocations, mailer, settings)


def get_user_service(db: DbSession) -> UserService:
    return UserService(db)


def get_category_service(db: DbSession) -> CategoryService:
    return CategoryService(db)


def get_product_service(db: DbSession) -> ProductService:
    return ProductService(db)


def get_banner_service(db: DbSession) -> BannerService:
    return BannerService(db)
