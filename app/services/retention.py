"""Revocation retention: drop revocation entries whose tokens have expired anyway."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.revocation import get_revocation_store

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def run_retention(session: Session, settings: "Settings") -> int:
    """
    Purge expired revocation entries from the configured backend.

    Returns the number of entries removed. Idempotent: safe to run repeatedly.
    """
    store = get_revocation_store(session, settings)
    removed = store.purge_expired()
    if removed > 0:
        logger.info(
            "Retention run: backend=%s, revocations_purged=%s",
            settings.REVOCATION_BACKEND,
            removed,
        )
    return removed
