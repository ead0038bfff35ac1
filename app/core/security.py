"""Password hashing and signed-token issuance/verification for authentication."""

import secrets
from datetime import UTC, datetime
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Claims set by the codec itself; callers cannot override them.
_DERIVED_CLAIMS = ("iat", "exp", "jti")

# Purpose marker on password-reset tokens; the request guard refuses them as sessions.
TOKEN_TYPE_CLAIM = "typ"
RESET_TOKEN_TYPE = "reset"


class TokenError(Exception):
    """Raised when a token cannot be trusted."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidSignatureError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


class MalformedTokenError(TokenError):
    pass


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash."""
    if not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _secret() -> str:
    return settings.JWT_SECRET.get_secret_value()


def issue_token(claims: dict[str, Any], ttl_seconds: int | None = None) -> str:
    """
    Sign claims into a token with iat = now, exp = iat + ttl and a random jti.

    ttl_seconds defaults to JWT_TTL_SECONDS.
    """
    ttl = settings.JWT_TTL_SECONDS if ttl_seconds is None else ttl_seconds
    issued_at = int(datetime.now(UTC).timestamp())
    payload = {k: v for k, v in claims.items() if k not in _DERIVED_CLAIMS}
    payload["iat"] = issued_at
    payload["exp"] = issued_at + ttl
    payload["jti"] = secrets.token_hex(8)
    return jwt.encode(payload, _secret(), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """
    Verify the signature and expiry, then return the claims.

    Raises InvalidSignatureError, TokenExpiredError or MalformedTokenError.
    """
    if not token or not isinstance(token, str):
        raise MalformedTokenError("Token is empty.")
    try:
        return jwt.decode(
            token,
            _secret(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired.") from e
    except jwt.InvalidSignatureError as e:
        raise InvalidSignatureError("Token signature is invalid.") from e
    except jwt.PyJWTError as e:
        raise MalformedTokenError("Token is malformed.") from e


def read_expiry(token: str) -> int | None:
    """Read exp without verifying the token. Only for revocation bookkeeping."""
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.PyJWTError:
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return int(exp)
