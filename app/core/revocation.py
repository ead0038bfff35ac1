"""
Revocation list for bearer tokens.

Entries map a sha256 fingerprint of the raw token to the token's own expiry
(unix seconds). An entry only counts while now < expiry; expired entries are
pruned lazily. Two backends share the same contract: a table (shared by every
process using the database) and a JSON file (single-process hosting).
"""

import hashlib
import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import read_expiry
from app.models.revoked_token import RevokedToken

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def fingerprint(token: str) -> str:
    """One-way fingerprint stored in place of the raw token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _now() -> int:
    return int(time.time())


def resolve_expiry(token: str, expires_at: int | None = None) -> int:
    """Use the supplied expiry, else the token's exp, else now + fallback TTL."""
    if expires_at is not None:
        return int(expires_at)
    exp = read_expiry(token)
    if exp is not None:
        return exp
    return _now() + settings.REVOCATION_FALLBACK_TTL_SECONDS


class RevocationStore(Protocol):
    def revoke(self, token: str, expires_at: int | None = None) -> None: ...

    def is_revoked(self, token: str) -> bool: ...

    def purge_expired(self) -> int: ...


class FileRevocationStore:
    """
    JSON-file backend: {"<fingerprint>": <expiry>, ...}.

    Every access runs read, prune and (if anything changed) write under a
    process-wide lock. Writes are atomic renames so readers never see a
    partial file. Concurrent processes may lose each other's purge, which
    only leaves already-expired entries around a little longer.
    """

    _locks: dict[str, threading.Lock] = {}
    _locks_guard = threading.Lock()

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        key = str(self.path.resolve())
        with self._locks_guard:
            self._lock = self._locks.setdefault(key, threading.Lock())

    def _read(self) -> dict[str, int]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Revocation file is not valid JSON; starting empty", extra={"path": str(self.path)})
            return {}
        if not isinstance(data, dict):
            return {}
        entries: dict[str, int] = {}
        for key, value in data.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                entries[str(key)] = int(value)
        return entries

    def _write(self, entries: dict[str, int]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".revoked-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(entries, fh, separators=(",", ":"), sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def _load_pruned(self) -> tuple[dict[str, int], int]:
        """Read entries and drop expired ones, persisting if anything was dropped."""
        entries = self._read()
        now = _now()
        live = {k: v for k, v in entries.items() if v > now}
        removed = len(entries) - len(live)
        if removed:
            self._write(live)
        return live, removed

    def revoke(self, token: str, expires_at: int | None = None) -> None:
        exp = resolve_expiry(token, expires_at)
        key = fingerprint(token)
        with self._lock:
            entries, _ = self._load_pruned()
            if exp <= _now() or entries.get(key, 0) >= exp:
                return
            entries[key] = exp
            self._write(entries)
        logger.info("Token revoked", extra={"fingerprint": key[:12], "backend": "file"})

    def is_revoked(self, token: str) -> bool:
        key = fingerprint(token)
        with self._lock:
            entries, _ = self._load_pruned()
        return entries.get(key, 0) > _now()

    def purge_expired(self) -> int:
        with self._lock:
            _, removed = self._load_pruned()
        return removed


class DatabaseRevocationStore:
    """Table backend (revoked_tokens) with an index on expires_at."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def revoke(self, token: str, expires_at: int | None = None) -> None:
        exp = resolve_expiry(token, expires_at)
        key = fingerprint(token)
        now = _now()
        self.db.execute(delete(RevokedToken).where(RevokedToken.expires_at <= now))
        if exp <= now:
            self.db.commit()
            return
        row = self.db.get(RevokedToken, key)
        if row is None:
            self.db.add(RevokedToken(fingerprint=key, expires_at=exp))
        elif row.expires_at < exp:
            row.expires_at = exp
        try:
            self.db.commit()
        except IntegrityError:
            # Another request inserted the same fingerprint first.
            self.db.rollback()
            logger.debug("Token already revoked concurrently", extra={"fingerprint": key[:12]})
            return
        logger.info("Token revoked", extra={"fingerprint": key[:12], "backend": "database"})

    def is_revoked(self, token: str) -> bool:
        stmt = select(RevokedToken.fingerprint).where(
            RevokedToken.fingerprint == fingerprint(token),
            RevokedToken.expires_at > _now(),
        )
        return self.db.execute(stmt).first() is not None

    def purge_expired(self) -> int:
        result = self.db.execute(delete(RevokedToken).where(RevokedToken.expires_at <= _now()))
        self.db.commit()
        return result.rowcount or 0


def get_revocation_store(db: Session, config: "Settings | None" = None) -> RevocationStore:
    """Return the backend selected by REVOCATION_BACKEND."""
    config = config or settings
    if config.REVOCATION_BACKEND == "file":
        return FileRevocationStore(config.REVOCATION_FILE)
    return DatabaseRevocationStore(db)
