"""ORM model for revoked token fingerprints (database revocation backend)."""

from sqlalchemy import BigInteger, Column, DateTime, String, func

from app.models.base import Base


class RevokedToken(Base):
    """
    One row per revoked token.

    fingerprint is the sha256 hex digest of the raw token; the token itself is
    never stored. expires_at mirrors the token's exp (unix seconds) so rows can
    be pruned once the token would have expired anyway.
    """

    __tablename__ = "revoked_tokens"

    fingerprint = Column(String(64), primary_key=True)
    expires_at = Column(BigInteger, nullable=False, index=True)
    revoked_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
