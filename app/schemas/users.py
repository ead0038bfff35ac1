"""Request schemas for user administration."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserCreateRequest(BaseModel):
    """Administrative creation of a user."""

    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=128)
    role: str | int | None = Field(default=None, description="Role input; defaults to CLIENT_ROLE")
    role_value: str | None = Field(default=None, description="Alternative key for role")


class UserUpdateRequest(BaseModel):
    """Partial update: only fields present in the body are changed."""

    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=128)
    role: str | int | None = None
    role_value: str | None = None
    connected_at: datetime | None = None
    disconnected_at: datetime | None = None
