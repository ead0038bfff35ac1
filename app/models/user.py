"""ORM model for application users (credentials, role and single active session token)."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from app.core.roles import DEFAULT_ROLE, Role
from app.models.base import Base


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role holds the role wire value (e.g. ADMIN_ROLE). token mirrors the last
    issued session token; a new login overwrites it and logout clears it.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=DEFAULT_ROLE.value)
    token = Column(Text, nullable=True)
    connected_at = Column(DateTime(timezone=True), nullable=True)
    disconnected_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

    @property
    def role_enum(self) -> Role | None:
        try:
            return Role(self.role)
        except ValueError:
            return None
