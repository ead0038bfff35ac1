"""Test environment: in-memory SQLite, a fixed JWT secret and temp dirs for files. Set before app imports."""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="reyes-tests-")

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-do-not-use-in-production"
os.environ["REVOCATION_BACKEND"] = "database"
os.environ["REVOCATION_FILE"] = os.path.join(_TMP_DIR, "revoked_tokens.json")
os.environ["MEDIA_ROOT"] = os.path.join(_TMP_DIR, "uploads")
os.environ["MEDIA_BASE_URL"] = "http://testserver/uploads"
os.environ["URL_SERVER"] = "http://testserver"
os.environ.pop("SMTP_HOST", None)
