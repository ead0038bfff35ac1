"""Authentication flows: registration, login, logout, activation and password recovery."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.errors import (
    AuthorizationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from app.core.revocation import RevocationStore, fingerprint
from app.core.roles import SELF_SERVICE_ROLES, Role, parse_role
from app.core.security import (
    RESET_TOKEN_TYPE,
    TOKEN_TYPE_CLAIM,
    TokenError,
    decode_token,
    hash_password,
    issue_token,
    read_expiry,
    verify_password,
)
from app.core.validation import check_email, check_name, check_password, clean_text
from app.models.user import User
from app.repositories.users import UserRepository
from app.services.mailer import Mailer

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

LOGOUT_MESSAGE = "Session closed successfully."
INVALID_TOKEN_MESSAGE = "Invalid or expired token."


def build_claims(user: User, role: Role, client_ip: str) -> dict[str, Any]:
    """Claims embedded in every token issued for a user."""
    return {
        "id": user.id,
        "full_name": user.full_name,
        "email": user.email,
        "role": role.label,
        "ip": client_ip,
    }


def _user_role(user: User) -> Role:
    return user.role_enum or parse_role(user.role)


class AuthService:
    """
    Orchestrates the token lifecycle around the users table.

    Tokens are only created here; the request guard only reads them.
    """

    def __init__(
        self,
        db: Session,
        revocations: RevocationStore,
        mailer: Mailer,
        settings: "Settings",
    ) -> None:
        self.db = db
        self.users = UserRepository(db)
        self.revocations = revocations
        self.mailer = mailer
        self.settings = settings

    def _link(self, path: str, token: str) -> str:
        return f"{self.settings.URL_SERVER}{path}?token={token}"

    def _trusted_claims(self, token: str) -> dict[str, Any]:
        """Decode and check revocation; ValidationError when the token cannot be used."""
        if not token:
            raise ValidationError("Token is required.")
        try:
            claims = decode_token(token)
        except TokenError as e:
            raise ValidationError(INVALID_TOKEN_MESSAGE) from e
        if self.revocations.is_revoked(token):
            raise ValidationError(INVALID_TOKEN_MESSAGE)
        return claims

    def _reset_claims(self, token: str) -> dict[str, Any]:
        claims = self._trusted_claims(token)
        if claims.get(TOKEN_TYPE_CLAIM) != RESET_TOKEN_TYPE:
            raise ValidationError(INVALID_TOKEN_MESSAGE)
        return claims

    def register(
        self,
        first_name: Any,
        last_name: Any,
        password: Any,
        email: Any,
        role: Any = None,
        client_ip: str = "",
    ) -> dict[str, Any]:
        """
        Create a user and its first session token.

        The row is flushed first so the token carries the real id; insert and
        token update commit together.
        """
        missing = [
            name
            for name, value in (
                ("first_name", first_name),
                ("last_name", last_name),
                ("email", email),
                ("password", password),
            )
            if not clean_text(value)
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}.")

        email_norm = check_email(email)
        check_password(password)
        first = check_name(first_name, "first_name")
        last = check_name(last_name, "last_name")
        user_role = parse_role(role)

        if self.users.email_exists(email_norm):
            raise DuplicateEmailError()
        if user_role not in SELF_SERVICE_ROLES:
            raise AuthorizationError(f"The {user_role.label} role cannot be self-assigned.")

        try:
            with transaction(self.db):
                user = self.users.create(
                    first_name=first,
                    last_name=last,
                    email=email_norm,
                    password_hash=hash_password(password),
                    role=user_role.value,
                )
                token = issue_token(build_claims(user, user_role, client_ip))
                self.users.set_token(user, token)
        except IntegrityError as e:
            raise DuplicateEmailError() from e

        logger.info("User registered", extra={"user_id": user.id, "role": user_role.value})
        self.mailer.send_quietly(
            user.email,
            "activation",
            {"name": user.full_name, "link": self._link(f"{self.settings.AUTH_PREFIX}/activate", token)},
        )
        return {
            "id": user.id,
            "name": user.full_name,
            "email": user.email,
            "role": user_role.label,
            "role_value": user_role.value,
        }

    def login(self, email: Any, password: Any, client_ip: str = "") -> dict[str, Any]:
        """Verify credentials and rotate the stored session token."""
        email_value = clean_text(email)
        if not email_value or not isinstance(password, str) or not password:
            raise ValidationError("Email and password are required.")

        user = self.users.find_by_email(email_value)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed", extra={"reason": "invalid_credentials"})
            raise InvalidCredentialsError()

        role = _user_role(user)
        with transaction(self.db):
            token = issue_token(build_claims(user, role, client_ip))
            self.users.set_token(user, token, connected_at=datetime.now(UTC))

        logger.info("User logged in", extra={"user_id": user.id})
        return {
            "id": user.id,
            "full_name": user.full_name,
            "email": user.email,
            "role": role.label,
            "role_number": role.rank,
            "role_value": role.value,
            "token": token,
        }

    def logout(self, token: str | None) -> str:
        """
        Revoke the token and clear the stored session. Never fails.

        Each step is attempted independently; failures are logged.
        """
        if not token:
            return LOGOUT_MESSAGE
        token_ref = fingerprint(token)[:12]

        try:
            self.revocations.revoke(token, read_expiry(token))
        except Exception:
            logger.warning("Logout: revocation failed", extra={"fingerprint": token_ref}, exc_info=True)

        try:
            with transaction(self.db):
                user = self.users.find_by_token(token)
                if user is None:
                    user_id = self._claimed_user_id(token)
                    user = self.users.find_by_id(user_id) if user_id else None
                    if user is not None and user.token is not None and user.token != token:
                        # A newer login owns the stored token; only stamp the disconnect.
                        user.disconnected_at = datetime.now(UTC)
                        user = None
                if user is not None:
                    self.users.set_token(user, None, disconnected_at=datetime.now(UTC))
        except Exception:
            logger.warning("Logout: clearing session failed", extra={"fingerprint": token_ref}, exc_info=True)

        return LOGOUT_MESSAGE

    @staticmethod
    def _claimed_user_id(token: str) -> int | None:
        try:
            user_id = decode_token(token).get("id")
        except TokenError:
            return None
        return user_id if isinstance(user_id, int) and user_id > 0 else None

    def activate(self, token: Any) -> str:
        value = clean_text(token)
        if not value:
            raise ValidationError("Token is required.")
        user = self.users.find_by_token(value)
        if user is None:
            raise AuthorizationError(INVALID_TOKEN_MESSAGE)
        self.mailer.send_quietly(user.email, "account_activated", {"name": user.full_name})
        logger.info("Account activated", extra={"user_id": user.id})
        return "Account validated. You can now log in."

    def send_recovery_email(self, email: Any, client_ip: str = "") -> str:
        """Email a password-reset link carrying a short-lived token."""
        value = clean_text(email)
        if not value:
            raise ValidationError("Email is required.")
        user = self.users.find_by_email(value)
        if user is None:
            raise AuthorizationError("Email is not registered.")
        ttl = self.settings.RESET_TOKEN_TTL_SECONDS
        claims = {**build_claims(user, _user_role(user), client_ip), TOKEN_TYPE_CLAIM: RESET_TOKEN_TYPE}
        reset_token = issue_token(claims, ttl_seconds=ttl)
        self.mailer.send_quietly(
            user.email,
            "recovery",
            {"link": self._link("/reset-password", reset_token), "minutes": ttl // 60},
        )
        logger.info("Recovery email requested", extra={"user_id": user.id})
        return "We sent an email with instructions to reset your password."

    def check_recovery_token(self, token: Any) -> str:
        claims = self._reset_claims(clean_text(token))
        name = claims.get("full_name") or claims.get("email") or ""
        return f"{name}, your recovery request is valid."

    def reset_password(self, token: Any, new_password: Any) -> str:
        check_password(new_password)
        token_value = clean_text(token)
        claims = self._reset_claims(token_value)
        user_id = claims.get("id")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
            raise ValidationError("Invalid token: missing ID.")

        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found.")

        with transaction(self.db):
            self.users.update_password(user, hash_password(new_password))
            self.users.set_token(user, None, disconnected_at=datetime.now(UTC))
        self.revocations.revoke(token_value, claims.get("exp"))

        self.mailer.send_quietly(user.email, "password_changed", {"name": user.full_name})
        logger.info("Password reset", extra={"user_id": user.id})
        return "Your password has been updated."
