"""HTTP tests for user administration and its per-route role sets."""

import unittest

from api_case import ApiTestCase

from app.core.roles import Role
from app.core.validation import INVALID_ID_MESSAGE


def _new_user(**overrides: object) -> dict:
    body = {
        "first_name": "Luis",
        "last_name": "Gómez",
        "email": "luis@example.com",
        "password": "password123",
    }
    body.update(overrides)
    return body


class TestListAndGet(ApiTestCase):
    def test_seller_can_list_users(self) -> None:
        response = self.client.get("/api/users", headers=self.headers_for(Role.SELLER))
        self.assertEqual(response.status_code, 200)
        users = response.json()["users"]
        self.assertEqual([u["email"] for u in users], ["seller@example.com"])
        self.assertNotIn("password_hash", users[0])
        self.assertNotIn("token", users[0])

    def test_dev_can_view_a_user(self) -> None:
        target = self.create_user("target@example.com")
        response = self.client.get(f"/api/users/{target}", headers=self.headers_for(Role.DEV))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role"], "Cliente")

    def test_bad_and_unknown_ids(self) -> None:
        headers = self.headers_for(Role.ADMIN)
        bad = self.client.get("/api/users/abc", headers=headers)
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(bad.json()["message"], INVALID_ID_MESSAGE)
        self.assertEqual(self.client.get("/api/users/0", headers=headers).status_code, 400)
        self.assertEqual(self.client.get("/api/users/999", headers=headers).status_code, 404)

    def test_support_cannot_view_a_user(self) -> None:
        target = self.create_user("target@example.com")
        response = self.client.get(f"/api/users/{target}", headers=self.headers_for(Role.SUPPORT))
        self.assertEqual(response.status_code, 403)


class TestCreateUser(ApiTestCase):
    """Administrative creation; only a SUPERADMIN may create administrators."""

    def test_admin_creates_client(self) -> None:
        response = self.client.post("/api/users", json=_new_user(), headers=self.headers_for(Role.ADMIN))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["role_value"], "CLIENT_ROLE")

    def test_admin_cannot_create_admin(self) -> None:
        response = self.client.post(
            "/api/users", json=_new_user(role="ADMIN_ROLE"), headers=self.headers_for(Role.ADMIN)
        )
        self.assertEqual(response.status_code, 403)

    def test_superadmin_creates_admin_by_rank(self) -> None:
        response = self.client.post("/api/users", json=_new_user(role=9), headers=self.headers_for(Role.SUPERADMIN))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["role_value"], "ADMIN_ROLE")

    def test_invalid_role_is_400(self) -> None:
        response = self.client.post(
            "/api/users", json=_new_user(role="emperor"), headers=self.headers_for(Role.SUPERADMIN)
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid role.")

    def test_duplicate_email_is_409(self) -> None:
        headers = self.headers_for(Role.ADMIN)
        self.client.post("/api/users", json=_new_user(), headers=headers)
        response = self.client.post("/api/users", json=_new_user(first_name="Otro"), headers=headers)
        self.assertEqual(response.status_code, 409)

    def test_dev_cannot_create(self) -> None:
        response = self.client.post("/api/users", json=_new_user(), headers=self.headers_for(Role.DEV))
        self.assertEqual(response.status_code, 403)


class TestUpdateUser(ApiTestCase):
    """Partial updates; non-admins may only edit themselves and cannot change roles."""

    def setUp(self) -> None:
        super().setUp()
        self.client_id = self.create_user("client@example.com")
        self.client_headers = self.bearer(self.login("client@example.com"))

    def test_client_updates_own_name(self) -> None:
        response = self.client.put(
            f"/api/users/{self.client_id}", json={"first_name": "Carla"}, headers=self.client_headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["first_name"], "Carla")

    def test_client_cannot_update_someone_else(self) -> None:
        other = self.create_user("other@example.com")
        response = self.client.put(f"/api/users/{other}", json={"first_name": "X"}, headers=self.client_headers)
        self.assertEqual(response.status_code, 403)

    def test_client_cannot_change_own_role(self) -> None:
        response = self.client.put(
            f"/api/users/{self.client_id}", json={"role": "ADMIN_ROLE"}, headers=self.client_headers
        )
        self.assertEqual(response.status_code, 403)

    def test_empty_update_is_400(self) -> None:
        response = self.client.put(f"/api/users/{self.client_id}", json={}, headers=self.client_headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "No fields to update.")

    def test_admin_changes_client_role(self) -> None:
        response = self.client.put(
            f"/api/users/{self.client_id}", json={"role": "Vendedor"}, headers=self.headers_for(Role.ADMIN)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role_value"], "SELLER_ROLE")

    def test_email_taken_by_other_user(self) -> None:
        self.create_user("taken@example.com")
        response = self.client.put(
            f"/api/users/{self.client_id}", json={"email": "Taken@example.com"}, headers=self.client_headers
        )
        self.assertEqual(response.status_code, 409)


class TestDeleteUser(ApiTestCase):
    """Only a SUPERADMIN may delete users."""

    def test_admin_cannot_delete(self) -> None:
        target = self.create_user("target@example.com")
        response = self.client.delete(f"/api/users/{target}", headers=self.headers_for(Role.ADMIN))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "Access denied. The Super Administrador role is required.")
        self.assertTrue(self.user_exists(target))

    def test_superadmin_deletes(self) -> None:
        headers = self.headers_for(Role.SUPERADMIN)
        target = self.create_user("target@example.com")
        self.assertEqual(self.client.delete(f"/api/users/{target}", headers=headers).status_code, 200)
        self.assertFalse(self.user_exists(target))
        self.assertEqual(self.client.delete(f"/api/users/{target}", headers=headers).status_code, 404)


if __name__ == "__main__":
    unittest.main()
