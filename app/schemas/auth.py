"""Request schemas for auth endpoints. Business rules are enforced by the auth service."""

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Self-service registration."""

    first_name: str | None = Field(default=None, max_length=255, description="First name")
    last_name: str | None = Field(default=None, max_length=255, description="Last name")
    email: str | None = Field(default=None, max_length=255, description="Email address (unique)")
    password: str | None = Field(default=None, max_length=128, description="Password (min 8 chars)")
    role: str | int | None = Field(
        default=None,
        description="Role as wire value, enum name, display name or rank; defaults to CLIENT_ROLE",
    )


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str | None = Field(default=None, max_length=255, description="Email address")
    password: str | None = Field(default=None, max_length=128, description="Password")


class ResetPasswordRequest(BaseModel):
    """New password plus the token from the recovery email."""

    token: str | None = Field(default=None, description="Reset token from the recovery link")
    password: str | None = Field(
        default=None,
        max_length=128,
        validation_alias="new_password",
        description="New password (min 8 chars)",
    )

    model_config = {"populate_by_name": True}
