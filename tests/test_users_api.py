"""
Users API tests.

Covers:
    - listing (any role, newest first, no password hashes)
    - creation: admin only, validation, duplicate username
    - is_active toggle 1 ↔ 0, self-protection
    - deletion keeps owned records with user_id cleared
"""

from conftest import bearer, create_client, make_user
from crm.models import db
from crm.models.client import Client


class TestListUsers:
    def test_any_role_can_list(self, client, admin, telepro):
        res = client.get("/api/users", headers=bearer(telepro))
        assert res.status_code == 200
        users = res.get_json()
        assert {u["username"] for u in users} == {"alice", "theo"}
        assert all("password_hash" not in u for u in users)


class TestCreateUser:
    def test_admin_creates_user(self, client, admin_headers):
        res = client.post(
            "/api/users",
            json={"username": "bob", "password": "correct-horse", "role": "manager",
                  "email": "Bob.Martin@Acme-Corp.fr", "nom": "Martin", "prenom": "Bob"},
            headers=admin_headers,
        )
        assert res.status_code == 201
        body = res.get_json()
        assert body["success"] is True

        res = client.post("/api/auth/login", json={"username": "bob", "password": "correct-horse"})
        assert res.status_code == 200
        assert res.get_json()["user"]["role"] == "manager"

    def test_default_role_is_user(self, client, admin_headers):
        client.post("/api/users", json={"username": "carl", "password": "12345678"}, headers=admin_headers)
        users = {u["username"]: u for u in client.get("/api/users", headers=admin_headers).get_json()}
        assert users["carl"]["role"] == "user"
        assert users["carl"]["is_active"] == 1

    def test_non_admin_forbidden(self, client, manager):
        res = client.post(
            "/api/users", json={"username": "eve", "password": "12345678"}, headers=bearer(manager)
        )
        assert res.status_code == 403

    def test_duplicate_username_conflict(self, client, admin_headers):
        make_user("dup")
        res = client.post("/api/users", json={"username": "dup", "password": "12345678"}, headers=admin_headers)
        assert res.status_code == 409

    def test_short_password_rejected(self, client, admin_headers):
        res = client.post("/api/users", json={"username": "shorty", "password": "short"}, headers=admin_headers)
        assert res.status_code == 422
        assert "password" in res.get_json()["details"]

    def test_password_over_bcrypt_limit_rejected(self, client, admin_headers):
        res = client.post("/api/users", json={"username": "longpw", "password": "x" * 80}, headers=admin_headers)
        assert res.status_code == 422
        assert res.get_json()["details"] == {"password": "too_long"}

        # 36 two-byte characters hit the limit exactly
        res = client.post("/api/users", json={"username": "edge", "password": "é" * 36}, headers=admin_headers)
        assert res.status_code == 201
        res = client.post("/api/users", json={"username": "over", "password": "é" * 37}, headers=admin_headers)
        assert res.status_code == 422

    def test_non_string_fields_rejected(self, client, admin_headers):
        res = client.post("/api/users", json={"username": "n", "password": 123456789}, headers=admin_headers)
        assert res.status_code == 422
        res = client.post(
            "/api/users", json={"username": ["a"], "password": "12345678"}, headers=admin_headers,
        )
        assert res.status_code == 422
        res = client.post(
            "/api/users", json={"username": "z", "password": "12345678", "email": 42}, headers=admin_headers,
        )
        assert res.status_code == 422

    def test_unknown_role_rejected(self, client, admin_headers):
        res = client.post(
            "/api/users", json={"username": "x", "password": "12345678", "role": "superuser"},
            headers=admin_headers,
        )
        assert res.status_code == 422

    def test_invalid_email_rejected(self, client, admin_headers):
        res = client.post(
            "/api/users", json={"username": "y", "password": "12345678", "email": "not-an-email"},
            headers=admin_headers,
        )
        assert res.status_code == 422


class TestToggleUser:
    def test_toggle_flips_between_0_and_1(self, client, admin_headers, regular_user):
        res = client.patch(f"/api/users/{regular_user.id}/toggle", headers=admin_headers)
        assert res.status_code == 200
        assert res.get_json() == {"success": True, "is_active": 0}

        res = client.patch(f"/api/users/{regular_user.id}/toggle", headers=admin_headers)
        assert res.get_json()["is_active"] == 1

    def test_toggle_unknown_user(self, client, admin_headers):
        res = client.patch("/api/users/does-not-exist/toggle", headers=admin_headers)
        assert res.status_code == 404

    def test_admin_cannot_toggle_self(self, client, admin, admin_headers):
        res = client.patch(f"/api/users/{admin.id}/toggle", headers=admin_headers)
        assert res.status_code == 422

    def test_non_admin_forbidden(self, client, manager, regular_user):
        res = client.patch(f"/api/users/{regular_user.id}/toggle", headers=bearer(manager))
        assert res.status_code == 403


class TestDeleteUser:
    def test_delete_keeps_owned_clients(self, client, admin_headers, telepro):
        client_id = create_client(client, bearer(telepro))

        res = client.delete(f"/api/users/{telepro.id}", headers=admin_headers)
        assert res.status_code == 200

        db.session.expire_all()
        orphan = db.session.get(Client, client_id)
        assert orphan is not None
        assert orphan.user_id is None

    def test_delete_unknown_user(self, client, admin_headers):
        assert client.delete("/api/users/nope", headers=admin_headers).status_code == 404

    def test_admin_cannot_delete_self(self, client, admin, admin_headers):
        assert client.delete(f"/api/users/{admin.id}", headers=admin_headers).status_code == 422
