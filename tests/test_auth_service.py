"""Tests for app.services.auth against an in-memory SQLite database."""

import shutil
import tempfile
import time
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from app.core.config import settings
from app.core.database import SessionLocal, engine
from app.core.errors import (
    AuthorizationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    ValidationError,
)
from app.core.revocation import FileRevocationStore
from app.core.security import decode_token
from app.models import Base, User
from app.services.auth import LOGOUT_MESSAGE, AuthService


def _register_kwargs(**overrides: object) -> dict:
    """Valid registration input."""
    data = {
        "first_name": "Ana",
        "last_name": "Pérez",
        "password": "password123",
        "email": "ana@example.com",
        "role": None,
        "client_ip": "10.0.0.1",
    }
    data.update(overrides)
    return data


class _AuthServiceCase(unittest.TestCase):
    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()
        self.tmp = tempfile.mkdtemp(prefix="auth-")
        self.revocations = FileRevocationStore(Path(self.tmp) / "revoked.json")
        self.mailer = MagicMock()
        self.service = AuthService(self.db, self.revocations, self.mailer, settings)

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(bind=engine)
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _stored_user(self, email: str = "ana@example.com") -> User:
        self.db.expire_all()
        return self.db.query(User).filter(User.email == email).one()

    def _last_mail_token(self) -> str:
        _to, _template, data = self.mailer.send_quietly.call_args.args
        return data["link"].split("token=", 1)[1]


class TestRegister(_AuthServiceCase):
    """Registration validates input, stores a hashed password and a token carrying the real id."""

    def test_register_returns_projection(self) -> None:
        result = self.service.register(**_register_kwargs())
        self.assertGreater(result["id"], 0)
        self.assertEqual(result["name"], "Ana Pérez")
        self.assertEqual(result["role"], "Cliente")
        self.assertEqual(result["role_value"], "CLIENT_ROLE")

    def test_stored_token_carries_real_id(self) -> None:
        result = self.service.register(**_register_kwargs())
        user = self._stored_user()
        self.assertNotEqual(user.password_hash, "password123")
        claims = decode_token(user.token)
        self.assertEqual(claims["id"], result["id"])
        self.assertEqual(claims["ip"], "10.0.0.1")
        self.assertEqual(claims["role"], "Cliente")

    def test_activation_email_is_sent(self) -> None:
        self.service.register(**_register_kwargs())
        to, template, data = self.mailer.send_quietly.call_args.args
        self.assertEqual((to, template), ("ana@example.com", "activation"))
        self.assertIn("/auth/activate?token=", data["link"])

    def test_duplicate_email_is_conflict(self) -> None:
        self.service.register(**_register_kwargs())
        with self.assertRaises(DuplicateEmailError) as ctx:
            self.service.register(**_register_kwargs(email="ANA@example.com"))
        self.assertEqual(ctx.exception.status_code, 409)

    def test_password_length_boundary(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.register(**_register_kwargs(password="1234567"))
        self.service.register(**_register_kwargs(password="12345678"))

    def test_missing_fields(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.register(**_register_kwargs(first_name="", email=None))
        self.assertIn("first_name", ctx.exception.message)
        self.assertIn("email", ctx.exception.message)

    def test_seller_may_self_register(self) -> None:
        result = self.service.register(**_register_kwargs(role="Vendedor"))
        self.assertEqual(result["role_value"], "SELLER_ROLE")

    def test_admin_role_cannot_be_self_assigned(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.register(**_register_kwargs(role="ADMIN_ROLE"))
        self.assertEqual(self.db.query(User).count(), 0)


class TestLoginLogout(_AuthServiceCase):
    """Login rotates the stored token; logout revokes it and never fails."""

    def setUp(self) -> None:
        super().setUp()
        self.service.register(**_register_kwargs())

    def test_login_issues_fresh_token(self) -> None:
        before = int(time.time())
        session = self.service.login("Ana@Example.com", "password123", client_ip="10.0.0.9")
        claims = decode_token(session["token"])
        self.assertEqual(session["role_number"], 1)
        self.assertEqual(claims["exp"], claims["iat"] + settings.JWT_TTL_SECONDS)
        self.assertLessEqual(abs(claims["iat"] - before), 1)
        user = self._stored_user()
        self.assertEqual(user.token, session["token"])
        self.assertIsNotNone(user.connected_at)

    def test_wrong_password_and_unknown_email_share_error(self) -> None:
        with self.assertRaises(InvalidCredentialsError) as wrong:
            self.service.login("ana@example.com", "not-the-password")
        with self.assertRaises(InvalidCredentialsError) as unknown:
            self.service.login("nobody@example.com", "password123")
        self.assertEqual(wrong.exception.message, unknown.exception.message)
        self.assertEqual(wrong.exception.status_code, 401)

    def test_missing_credentials(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.login("", "password123")

    def test_logout_revokes_and_clears(self) -> None:
        token = self.service.login("ana@example.com", "password123")["token"]
        self.assertEqual(self.service.logout(token), LOGOUT_MESSAGE)
        self.assertTrue(self.revocations.is_revoked(token))
        user = self._stored_user()
        self.assertIsNone(user.token)
        self.assertIsNotNone(user.disconnected_at)

    def test_logout_twice_is_safe(self) -> None:
        token = self.service.login("ana@example.com", "password123")["token"]
        self.assertEqual(self.service.logout(token), LOGOUT_MESSAGE)
        self.assertEqual(self.service.logout(token), LOGOUT_MESSAGE)
        self.assertTrue(self.revocations.is_revoked(token))

    def test_logout_survives_revocation_failure(self) -> None:
        token = self.service.login("ana@example.com", "password123")["token"]
        self.service.revocations = MagicMock()
        self.service.revocations.revoke.side_effect = OSError("disk full")
        self.assertEqual(self.service.logout(token), LOGOUT_MESSAGE)
        self.assertIsNone(self._stored_user().token)

    def test_logout_of_stale_token_keeps_newer_session(self) -> None:
        old = self.service.login("ana@example.com", "password123")["token"]
        new = self.service.login("ana@example.com", "password123")["token"]
        self.service.logout(old)
        self.assertEqual(self._stored_user().token, new)
        self.assertFalse(self.revocations.is_revoked(new))


class TestActivationAndRecovery(_AuthServiceCase):
    """Activation checks the stored token; recovery issues a short-lived reset token."""

    def setUp(self) -> None:
        super().setUp()
        self.service.register(**_register_kwargs())

    def test_activate_with_stored_token(self) -> None:
        token = self._stored_user().token
        self.assertIn("Account validated", self.service.activate(token))

    def test_activate_with_unknown_token(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.activate("not-a-stored-token")
        with self.assertRaises(ValidationError):
            self.service.activate("")

    def test_recovery_for_unknown_email(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.send_recovery_email("nobody@example.com")

    def test_full_recovery_flow(self) -> None:
        self.service.send_recovery_email("ana@example.com")
        reset_token = self._last_mail_token()
        claims = decode_token(reset_token)
        self.assertEqual(claims["exp"] - claims["iat"], settings.RESET_TOKEN_TTL_SECONDS)
        self.assertEqual(claims["typ"], "reset")
        self.assertIn("Ana Pérez", self.service.check_recovery_token(reset_token))

        self.service.reset_password(reset_token, "brand-new-pass")
        self.service.login("ana@example.com", "brand-new-pass")
        with self.assertRaises(InvalidCredentialsError):
            self.service.login("ana@example.com", "password123")

    def test_reset_token_is_single_use(self) -> None:
        self.service.send_recovery_email("ana@example.com")
        reset_token = self._last_mail_token()
        self.service.reset_password(reset_token, "brand-new-pass")
        with self.assertRaises(ValidationError):
            self.service.reset_password(reset_token, "another-pass-1")
        with self.assertRaises(ValidationError):
            self.service.check_recovery_token(reset_token)

    def test_reset_rejects_short_password_and_bad_token(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.reset_password("whatever", "short")
        with self.assertRaises(ValidationError):
            self.service.reset_password("not-a-token", "long-enough-pass")

    def test_session_token_is_not_a_reset_token(self) -> None:
        session_token = self.service.login("ana@example.com", "password123")["token"]
        with self.assertRaises(ValidationError):
            self.service.check_recovery_token(session_token)
        with self.assertRaises(ValidationError):
            self.service.reset_password(session_token, "brand-new-pass")
        self.service.login("ana@example.com", "password123")


if __name__ == "__main__":
    unittest.main()
