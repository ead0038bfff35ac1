"""Unit tests for the request guard helpers: token extraction, path normalization, public routes."""

import unittest
from unittest.mock import MagicMock

from app.api.guard import extract_bearer_token, is_public, normalize_path, resolve_client_ip


def _request(headers: dict[str, str], host: str | None = "127.0.0.1") -> MagicMock:
    """Minimal stand-in for a Starlette Request."""
    request = MagicMock()
    request.headers = headers
    request.client = MagicMock(host=host) if host else None
    return request


class TestExtractBearerToken(unittest.TestCase):
    """The first header present in the chain decides; only Bearer values count."""

    def test_authorization_header(self) -> None:
        self.assertEqual(extract_bearer_token({"authorization": "Bearer abc.def.ghi"}), "abc.def.ghi")

    def test_scheme_is_case_insensitive_and_trimmed(self) -> None:
        self.assertEqual(extract_bearer_token({"authorization": "  bearer   tok  "}), "tok")

    def test_forwarded_header_used_when_authorization_absent(self) -> None:
        headers = {"x-original-authorization": "Bearer proxied"}
        self.assertEqual(extract_bearer_token(headers), "proxied")

    def test_present_non_bearer_authorization_decides(self) -> None:
        headers = {"authorization": "Basic dXNlcjpwYXNz", "x-original-authorization": "Bearer proxied"}
        self.assertIsNone(extract_bearer_token(headers))

    def test_present_empty_authorization_decides(self) -> None:
        headers = {"authorization": "", "x-authorization": "Bearer later"}
        self.assertIsNone(extract_bearer_token(headers))

    def test_first_header_in_chain_wins(self) -> None:
        headers = {"x-authorization": "Bearer last", "x-forwarded-authorization": "Bearer second"}
        self.assertEqual(extract_bearer_token(headers), "second")

    def test_missing_or_empty(self) -> None:
        self.assertIsNone(extract_bearer_token({}))
        self.assertIsNone(extract_bearer_token({"authorization": "Bearer "}))


class TestNormalizePath(unittest.TestCase):
    def test_strips_query_and_trailing_slash(self) -> None:
        self.assertEqual(normalize_path("/api/productos/?page=2"), "/api/productos")

    def test_root_stays_root(self) -> None:
        self.assertEqual(normalize_path("/"), "/")
        self.assertEqual(normalize_path(""), "/")

    def test_strips_deploy_prefix(self) -> None:
        self.assertEqual(normalize_path("/backend/api/banners", "/backend"), "/api/banners")
        self.assertEqual(normalize_path("/backend", "/backend"), "/")
        self.assertEqual(normalize_path("/backendx/api", "/backend"), "/backendx/api")


class TestIsPublic(unittest.TestCase):
    """Exact method and path matches only."""

    def test_public_reads(self) -> None:
        self.assertTrue(is_public("GET", "/"))
        self.assertTrue(is_public("GET", "/api/productos"))
        self.assertTrue(is_public("get", "/api/categorias/"))
        self.assertTrue(is_public("HEAD", "/api/banners"))

    def test_public_auth_actions(self) -> None:
        self.assertTrue(is_public("POST", "/auth/login"))
        self.assertTrue(is_public("POST", "/auth/register"))
        self.assertTrue(is_public("GET", "/auth/reset-password?token=x"))

    def test_not_public(self) -> None:
        self.assertFalse(is_public("POST", "/api/productos"))
        self.assertFalse(is_public("GET", "/api/productos/5"))
        self.assertFalse(is_public("POST", "/auth/logout"))
        self.assertFalse(is_public("DELETE", "/api/banners"))
        self.assertFalse(is_public("GET", "/api/users"))


class TestResolveClientIp(unittest.TestCase):
    def test_client_ip_header_first(self) -> None:
        request = _request({"client-ip": "1.1.1.1", "x-forwarded-for": "2.2.2.2"})
        self.assertEqual(resolve_client_ip(request), "1.1.1.1")

    def test_first_forwarded_hop(self) -> None:
        request = _request({"x-forwarded-for": " 2.2.2.2 , 3.3.3.3"})
        self.assertEqual(resolve_client_ip(request), "2.2.2.2")

    def test_socket_peer(self) -> None:
        self.assertEqual(resolve_client_ip(_request({})), "127.0.0.1")
        self.assertEqual(resolve_client_ip(_request({}, host=None)), "")


if __name__ == "__main__":
    unittest.main()
