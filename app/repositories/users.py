"""Repository for User rows: lookups used by authentication plus CRUD for administration."""

from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.models.user import User


class UserRepository:
    """
    Query helpers for users.

    Lookups return None when nothing matches. Methods flush but never commit;
    the calling service owns the transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.execute(stmt).scalars().first()

    def find_by_token(self, token: str) -> User | None:
        if not token:
            return None
        stmt = select(User).where(User.token == token)
        return self.db.execute(stmt).scalars().first()

    def email_exists(self, email: str, exclude_id: int | None = None) -> bool:
        stmt = select(User.id).where(func.lower(User.email) == email.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def list_all(self) -> list[User]:
        return list(self.db.execute(select(User).order_by(User.id)).scalars())

    def create(self, **fields: Any) -> User:
        user = User(**fields)
        self.db.add(user)
        self.db.flush()
        return user

    def update(self, user: User, fields: dict[str, Any]) -> User:
        for name, value in fields.items():
            setattr(user, name, value)
        self.db.flush()
        return user

    def set_token(
        self,
        user: User,
        token: str | None,
        connected_at: datetime | None = None,
        disconnected_at: datetime | None = None,
    ) -> None:
        user.token = token
        if connected_at is not None:
            user.connected_at = connected_at
        if disconnected_at is not None:
            user.disconnected_at = disconnected_at
        self.db.flush()

    def update_password(self, user: User, password_hash: str) -> None:
        user.password_hash = password_hash
        self.db.flush()

    def delete(self, user_id: int) -> bool:
        result = self.db.execute(delete(User).where(User.id == user_id))
        return (result.rowcount or 0) > 0
