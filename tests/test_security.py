"""Unit tests for app.core.security: password hashing and the token codec."""

import time
import unittest

import jwt

from app.core.config import settings
from app.core.security import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
    decode_token,
    hash_password,
    issue_token,
    read_expiry,
    verify_password,
)


def _claims(**overrides: object) -> dict:
    """Claims shaped like the ones issued at login."""
    claims = {
        "id": 7,
        "full_name": "Ana Pérez",
        "email": "ana@example.com",
        "role": "Cliente",
        "ip": "10.0.0.1",
    }
    claims.update(overrides)
    return claims


class TestPasswordHashing(unittest.TestCase):
    """bcrypt hash and verify."""

    def test_hash_is_not_plain_and_verifies(self) -> None:
        hashed = hash_password("s3cret-pass")
        self.assertNotEqual(hashed, "s3cret-pass")
        self.assertTrue(verify_password("s3cret-pass", hashed))
        self.assertFalse(verify_password("wrong-pass", hashed))

    def test_verify_against_missing_or_garbage_hash(self) -> None:
        self.assertFalse(verify_password("anything", None))
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))


class TestTokenRoundTrip(unittest.TestCase):
    """decode(issue(claims)) returns the claims plus derived iat/exp."""

    def test_claims_survive_round_trip(self) -> None:
        claims = _claims()
        decoded = decode_token(issue_token(claims))
        for key, value in claims.items():
            self.assertEqual(decoded[key], value)

    def test_exp_is_iat_plus_default_ttl(self) -> None:
        before = int(time.time())
        decoded = decode_token(issue_token(_claims()))
        after = int(time.time())
        self.assertGreaterEqual(decoded["iat"], before)
        self.assertLessEqual(decoded["iat"], after)
        self.assertEqual(decoded["exp"], decoded["iat"] + settings.JWT_TTL_SECONDS)

    def test_explicit_ttl(self) -> None:
        decoded = decode_token(issue_token(_claims(), ttl_seconds=600))
        self.assertEqual(decoded["exp"] - decoded["iat"], 600)

    def test_caller_cannot_override_derived_claims(self) -> None:
        decoded = decode_token(issue_token(_claims(iat=1, exp=2)))
        self.assertNotEqual(decoded["iat"], 1)
        self.assertGreater(decoded["exp"], decoded["iat"])

    def test_tokens_issued_together_differ(self) -> None:
        self.assertNotEqual(issue_token(_claims()), issue_token(_claims()))


class TestTokenFailures(unittest.TestCase):
    """Typed failures for bad signature, expiry and malformed input."""

    def test_wrong_secret_is_invalid_signature(self) -> None:
        now = int(time.time())
        forged = jwt.encode({"id": 1, "iat": now, "exp": now + 60}, "another-secret", algorithm="HS256")
        with self.assertRaises(InvalidSignatureError):
            decode_token(forged)

    def test_expired_token(self) -> None:
        token = issue_token(_claims(), ttl_seconds=-10)
        with self.assertRaises(TokenExpiredError):
            decode_token(token)

    def test_garbage_is_malformed(self) -> None:
        with self.assertRaises(MalformedTokenError):
            decode_token("not-a-token")
        with self.assertRaises(MalformedTokenError):
            decode_token("")

    def test_missing_exp_is_malformed(self) -> None:
        token = jwt.encode(
            {"id": 1, "iat": int(time.time())},
            settings.JWT_SECRET.get_secret_value(),
            algorithm="HS256",
        )
        with self.assertRaises(MalformedTokenError):
            decode_token(token)


class TestReadExpiry(unittest.TestCase):
    """read_expiry reads exp without verification."""

    def test_reads_exp_even_when_expired(self) -> None:
        token = issue_token(_claims(), ttl_seconds=-10)
        exp = read_expiry(token)
        self.assertIsNotNone(exp)
        self.assertLess(exp, int(time.time()))

    def test_none_for_garbage(self) -> None:
        self.assertIsNone(read_expiry("garbage"))


if __name__ == "__main__":
    unittest.main()
