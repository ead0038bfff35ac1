"""
Request guard: public-route policy, bearer token extraction and role checks.

Every router is mounted with `authenticate` as a dependency. It lets the
explicit public allow-list through and, for everything else, resolves a
request-scoped AuthContext or rejects the request before the handler runs.
Route-level role sets are declared with the require_* / exclude_role /
allow_all_roles dependency factories.
"""

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import AuthenticationError, AuthorizationError
from app.core.revocation import RevocationStore, fingerprint, get_revocation_store
from app.core.roles import ALL_ROLES, Role
from app.core.security import RESET_TOKEN_TYPE, TOKEN_TYPE_CLAIM, TokenError, decode_token
from app.repositories.users import UserRepository

logger = logging.getLogger(__name__)

# Header names in precedence order; proxies that rewrite Authorization use the middle ones.
TOKEN_HEADER_CHAIN = (
    "authorization",
    "x-forwarded-authorization",
    "x-original-authorization",
    "x-authorization",
)
BEARER_PATTERN = re.compile(r"^\s*Bearer\s+(.+?)\s*$", re.IGNORECASE)

MISSING_TOKEN_MESSAGE = "Unauthorized access or invalid token."
INVALID_TOKEN_MESSAGE = "Invalid or revoked token."
MISSING_ID_MESSAGE = "Invalid token or missing ID."
ROLE_DENIED_MESSAGE = "Access denied. Your role is not allowed to perform this action."

# Routes reachable without a token: exact (method, normalized path) matches only.
PUBLIC_ROUTES: Mapping[str, frozenset[str]] = {
    "GET": frozenset(
        {
            "/",
            f"{settings.AUTH_PREFIX}/activate",
            f"{settings.AUTH_PREFIX}/reset-password-email",
            f"{settings.AUTH_PREFIX}/reset-password",
            f"{settings.API_PREFIX}/productos",
            f"{settings.API_PREFIX}/categorias",
            f"{settings.API_PREFIX}/banners",
        }
    ),
    "POST": frozenset(
        {
            f"{settings.AUTH_PREFIX}/register",
            f"{settings.AUTH_PREFIX}/login",
            f"{settings.AUTH_PREFIX}/reset-password",
        }
    ),
}


@dataclass
class AuthContext:
    """Who is calling, resolved once per request and stored on request.state.auth."""

    user_id: int
    role: Role
    token: str
    claims: dict[str, Any] = field(default_factory=dict, repr=False)


def normalize_path(path: str, root_path: str = "") -> str:
    """Strip the query string, the deploy prefix and any trailing slash."""
    clean = path.split("?", 1)[0] or "/"
    if root_path and (clean == root_path or clean.startswith(root_path + "/")):
        clean = clean[len(root_path):] or "/"
    if len(clean) > 1:
        clean = clean.rstrip("/") or "/"
    return clean


def is_public(method: str, path: str) -> bool:
    allowed = PUBLIC_ROUTES.get(method.upper())
    if method.upper() == "HEAD":
        allowed = PUBLIC_ROUTES.get("GET")
    return allowed is not None and normalize_path(path, settings.ROOT_PATH) in allowed


def extract_bearer_token(headers: Mapping[str, str]) -> str | None:
    """
    Bearer token from the first TOKEN_HEADER_CHAIN header present, or None.

    Later headers are not consulted once one is present, even when its value
    is empty or uses another scheme.
    """
    for name in TOKEN_HEADER_CHAIN:
        value = headers.get(name)
        if value is None:
            continue
        match = BEARER_PATTERN.match(value)
        return match.group(1) if match else None
    return None


def resolve_client_ip(request: Request) -> str:
    """Client-IP header, then the first X-Forwarded-For hop, then the socket peer."""
    direct = request.headers.get("client-ip")
    if direct and direct.strip():
        return direct.strip()
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else ""


def get_revocations(db: Annotated[Session, Depends(get_db)]) -> RevocationStore:
    return get_revocation_store(db)


def authenticate(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    revocations: Annotated[RevocationStore, Depends(get_revocations)],
) -> AuthContext | None:
    """
    Router-level gate. Returns None on public routes, otherwise an AuthContext.

    Missing/malformed header -> 401. Bad signature, expired, malformed,
    password-reset, revoked, missing id or unknown user -> 403.
    """
    if is_public(request.method, request.url.path):
        return None

    token = extract_bearer_token(request.headers)
    if token is None:
        raise AuthenticationError(MISSING_TOKEN_MESSAGE)

    try:
        claims = decode_token(token)
    except TokenError as e:
        logger.info("Token rejected", extra={"reason": type(e).__name__, "path": request.url.path})
        raise AuthorizationError(INVALID_TOKEN_MESSAGE) from e
    if claims.get(TOKEN_TYPE_CLAIM) == RESET_TOKEN_TYPE:
        logger.info("Reset token presented as session", extra={"path": request.url.path})
        raise AuthorizationError(INVALID_TOKEN_MESSAGE)
    if revocations.is_revoked(token):
        logger.info("Revoked token presented", extra={"fingerprint": fingerprint(token)[:12]})
        raise AuthorizationError(INVALID_TOKEN_MESSAGE)

    user_id = claims.get("id")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        raise AuthorizationError(MISSING_ID_MESSAGE)

    user = UserRepository(db).find_by_id(user_id)
    role = user.role_enum if user is not None else None
    if role is None:
        raise AuthorizationError(ROLE_DENIED_MESSAGE)

    ctx = AuthContext(user_id=user_id, role=role, token=token, claims=claims)
    request.state.auth = ctx
    return ctx


def _authenticated(ctx: AuthContext | None) -> AuthContext:
    # A role dependency on a public route is a wiring mistake; fail closed.
    if ctx is None:
        raise AuthenticationError(MISSING_TOKEN_MESSAGE)
    return ctx


def require_any_of(*roles: Role) -> Callable[..., AuthContext]:
    """Allow only callers whose role is in roles."""
    allowed = frozenset(roles)

    def dependency(ctx: Annotated[AuthContext | None, Depends(authenticate)]) -> AuthContext:
        ctx = _authenticated(ctx)
        if ctx.role not in allowed:
            logger.info("Role denied", extra={"user_id": ctx.user_id, "role": ctx.role.value})
            raise AuthorizationError(ROLE_DENIED_MESSAGE)
        return ctx

    return dependency


def require_exactly(role: Role) -> Callable[..., AuthContext]:
    """Allow only callers holding exactly this role."""

    def dependency(ctx: Annotated[AuthContext | None, Depends(authenticate)]) -> AuthContext:
        ctx = _authenticated(ctx)
        if ctx.role != role:
            raise AuthorizationError(f"Access denied. The {role.label} role is required.")
        return ctx

    return dependency


def exclude_role(role: Role) -> Callable[..., AuthContext]:
    """Allow every role except this one."""

    def dependency(ctx: Annotated[AuthContext | None, Depends(authenticate)]) -> AuthContext:
        ctx = _authenticated(ctx)
        if ctx.role == role:
            raise AuthorizationError(
                f"Access denied. Users with the {role.label} role are not allowed to perform this action."
            )
        return ctx

    return dependency


def allow_all_roles() -> Callable[..., AuthContext]:
    """Any authenticated caller with a known role."""
    return require_any_of(*ALL_ROLES)
