"""User administration: listing, lookup, administrative creation, partial update and delete."""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.errors import (
    AuthorizationError,
    DuplicateEmailError,
    NotFoundError,
    ValidationError,
)
from app.core.roles import ADMIN_ROLES, Role, parse_role, resolve_role
from app.core.security import hash_password
from app.core.validation import NAME_MAX_LEN, check_email, check_name, check_password, clean_text
from app.models.user import User
from app.repositories.users import UserRepository

logger = logging.getLogger(__name__)

INVALID_ROLE_MESSAGE = "Invalid role."


def user_to_dict(user: User) -> dict[str, Any]:
    """Public projection of a user; never includes the password hash or token."""
    role = user.role_enum or parse_role(user.role)
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "role": role.label,
        "role_value": role.value,
        "connected_at": user.connected_at,
        "disconnected_at": user.disconnected_at,
        "created_at": user.created_at,
    }


def _role_input(data: dict[str, Any]) -> Any:
    return data.get("role") if data.get("role") not in (None, "") else data.get("role_value")


def _parse_timestamp(value: Any, field: str) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"{field} must be an ISO 8601 date-time.") from e


def _check_update_name(value: Any, field: str) -> str:
    name = clean_text(value)
    if not name:
        raise ValidationError(f"{field} must not be empty.")
    if len(name) > NAME_MAX_LEN:
        raise ValidationError(f"{field} must be at most {NAME_MAX_LEN} characters.")
    return name


class UserService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.users = UserRepository(db)

    def list_users(self) -> list[dict[str, Any]]:
        return [user_to_dict(u) for u in self.users.list_all()]

    def get_user(self, user_id: int) -> dict[str, Any]:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found.")
        return user_to_dict(user)

    def create_user(self, data: dict[str, Any], actor_role: Role) -> dict[str, Any]:
        """Administrative creation; the role must resolve explicitly."""
        missing = [f for f in ("first_name", "last_name", "email", "password") if not clean_text(data.get(f))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}.")
        email = check_email(data["email"])
        password = check_password(data["password"])
        first = check_name(data["first_name"], "first_name")
        last = check_name(data["last_name"], "last_name")

        raw_role = _role_input(data)
        role = Role.CLIENT if raw_role in (None, "") else resolve_role(raw_role)
        if role is None:
            raise ValidationError(INVALID_ROLE_MESSAGE)
        if actor_role != Role.SUPERADMIN and role in ADMIN_ROLES:
            raise AuthorizationError("Only a Super Administrador can create administrator accounts.")

        if self.users.email_exists(email):
            raise DuplicateEmailError()
        try:
            with transaction(self.db):
                user = self.users.create(
                    first_name=first,
                    last_name=last,
                    email=email,
                    password_hash=hash_password(password),
                    role=role.value,
                )
        except IntegrityError as e:
            raise DuplicateEmailError() from e
        logger.info("User created by administrator", extra={"user_id": user.id, "role": role.value})
        return user_to_dict(user)

    def update_user(
        self,
        user_id: int,
        data: dict[str, Any],
        actor_id: int,
        actor_role: Role,
    ) -> dict[str, Any]:
        """
        Apply a partial update; only supplied keys change.

        Non-admin actors may only edit their own account and cannot change
        roles; only a SUPERADMIN may grant administrator roles.
        """
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found.")
        is_admin = actor_role in ADMIN_ROLES
        if not is_admin and actor_id != user_id:
            raise AuthorizationError("Access denied. You can only update your own account.")

        changes: dict[str, Any] = {}
        if "first_name" in data:
            changes["first_name"] = _check_update_name(data["first_name"], "first_name")
        if "last_name" in data:
            changes["last_name"] = _check_update_name(data["last_name"], "last_name")
        if "email" in data:
            email = check_email(data["email"])
            if self.users.email_exists(email, exclude_id=user_id):
                raise DuplicateEmailError()
            changes["email"] = email
        if "password" in data and data["password"] not in (None, ""):
            changes["password_hash"] = hash_password(check_password(data["password"]))

        raw_role = _role_input(data)
        if raw_role not in (None, ""):
            role = resolve_role(raw_role)
            if role is None:
                raise ValidationError(INVALID_ROLE_MESSAGE)
            if role.value != user.role:
                if not is_admin:
                    raise AuthorizationError("Access denied. You cannot change your own role.")
                if actor_role != Role.SUPERADMIN and (role in ADMIN_ROLES or user.role_enum in ADMIN_ROLES):
                    raise AuthorizationError("Only a Super Administrador can change administrator roles.")
            changes["role"] = role.value

        for field in ("connected_at", "disconnected_at"):
            if field in data:
                changes[field] = _parse_timestamp(data[field], field)

        if not changes:
            raise ValidationError("No fields to update.")

        try:
            with transaction(self.db):
                self.users.update(user, changes)
        except IntegrityError as e:
            raise DuplicateEmailError() from e
        logger.info("User updated", extra={"user_id": user_id, "fields": sorted(changes)})
        return user_to_dict(user)

    def delete_user(self, user_id: int) -> None:
        with transaction(self.db):
            deleted = self.users.delete(user_id)
        if not deleted:
            raise NotFoundError(f"User {user_id} not found.")
        logger.info("User deleted", extra={"user_id": user_id})
