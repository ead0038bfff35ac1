"""Pydantic request/response schemas."""

from app.schemas.auth import LoginRequest, RegisterRequest, ResetPasswordRequest
from app.schemas.catalog import BannerRequest, CategoryRequest
from app.schemas.health import HealthPayload
from app.schemas.users import UserCreateRequest, UserUpdateRequest

__all__ = [
    "BannerRequest",
    "CategoryRequest",
    "HealthPayload",
    "LoginRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "UserCreateRequest",
    "UserUpdateRequest",
]
