"""Auth endpoints: register, login, logout, activation and password recovery."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import get_auth_service
from app.api.guard import AuthContext, allow_all_roles, resolve_client_ip
from app.core.responses import ok
from app.schemas.auth import LoginRequest, RegisterRequest, ResetPasswordRequest
from app.services.auth import AuthService

router = APIRouter()

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, request: Request, service: AuthServiceDep) -> JSONResponse:
    """Create an account; the new user starts with a stored session token."""
    user = service.register(
        body.first_name,
        body.last_name,
        body.password,
        body.email,
        body.role,
        client_ip=resolve_client_ip(request),
    )
    return ok(user, "user", status.HTTP_201_CREATED)


@router.post("/login")
def login(body: LoginRequest, request: Request, service: AuthServiceDep) -> JSONResponse:
    """
    Authenticate with email and password; returns the session and a bearer token.
    Include the token in the Authorization header as: Bearer <token>
    """
    session = service.login(body.email, body.password, client_ip=resolve_client_ip(request))
    return ok(session, "user")


@router.post("/logout")
def logout(
    ctx: Annotated[AuthContext, Depends(allow_all_roles())],
    service: AuthServiceDep,
) -> JSONResponse:
    """Revoke the caller's token and clear the stored session."""
    return ok(service.logout(ctx.token), "message")


@router.get("/activate")
def activate(service: AuthServiceDep, token: str | None = None) -> JSONResponse:
    return ok(service.activate(token), "message")


@router.get("/reset-password-email")
def reset_password_email(
    request: Request,
    service: AuthServiceDep,
    email: str | None = None,
) -> JSONResponse:
    """Send a recovery link to a registered email."""
    return ok(service.send_recovery_email(email, client_ip=resolve_client_ip(request)), "message")


@router.get("/reset-password")
def check_reset_token(service: AuthServiceDep, token: str | None = None) -> JSONResponse:
    """Tell the reset page whether the link's token is still usable."""
    return ok(service.check_recovery_token(token), "message")


@router.post("/reset-password")
def reset_password(body: ResetPasswordRequest, service: AuthServiceDep) -> JSONResponse:
    return ok(service.reset_password(body.token, body.password), "message")
