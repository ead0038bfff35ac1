"""Unit tests for app.core.validation."""

import unittest

from app.core.errors import ValidationError
from app.core.validation import (
    INVALID_ID_MESSAGE,
    check_email,
    check_name,
    check_password,
    is_http_url,
    is_valid_email,
    parse_positive_id,
)


class TestParsePositiveId(unittest.TestCase):
    """Path ids must be digit strings greater than zero."""

    def test_accepts_positive_digits(self) -> None:
        self.assertEqual(parse_positive_id("12"), 12)
        self.assertEqual(parse_positive_id(3), 3)

    def test_rejects_everything_else(self) -> None:
        for raw in ("0", "-1", "1.5", "abc", "", " ", None, True, 0):
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError) as ctx:
                    parse_positive_id(raw)
                self.assertEqual(ctx.exception.message, INVALID_ID_MESSAGE)
                self.assertEqual(ctx.exception.status_code, 400)


class TestPassword(unittest.TestCase):
    def test_minimum_length_boundary(self) -> None:
        with self.assertRaises(ValidationError):
            check_password("1234567")
        self.assertEqual(check_password("12345678"), "12345678")

    def test_non_string_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            check_password(12345678)


class TestEmailAndNames(unittest.TestCase):
    def test_email_is_lowercased(self) -> None:
        self.assertEqual(check_email("  Ana@Example.COM "), "ana@example.com")

    def test_invalid_email(self) -> None:
        self.assertFalse(is_valid_email("not-an-email"))
        with self.assertRaises(ValidationError):
            check_email("ana@")

    def test_names_allow_spanish_letters(self) -> None:
        self.assertEqual(check_name(" José María ", "first_name"), "José María")

    def test_names_reject_digits(self) -> None:
        with self.assertRaises(ValidationError):
            check_name("R2D2", "first_name")

    def test_http_urls(self) -> None:
        self.assertTrue(is_http_url("https://cdn.example.com/a.png"))
        self.assertFalse(is_http_url("ftp://cdn.example.com/a.png"))
        self.assertFalse(is_http_url("/relative/path.png"))


if __name__ == "__main__":
    unittest.main()
