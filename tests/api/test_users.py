"""Tests for user API endpoints."""

import json

import pytest
from flask import Flask

from memos_core.config import settings
from memos_core.db import get_core


@pytest.fixture
def users(signup):
    return {
        "host": signup("owner"),
        "alice": signup("alice"),
        "bob": signup("bob"),
    }


class TestUserEndpoints:

    def test_list_users(self, client: Flask.test_client, users):
        response = client.get("/api/v1/users", headers=users["alice"]["headers"])
        assert response.status_code == 200
        usernames = [u["username"] for u in json.loads(response.data)]
        assert usernames == ["owner", "alice", "bob"]

    def test_get_user(self, client: Flask.test_client, users):
        response = client.get(f"/api/v1/users/{users['bob']['id']}", headers=users["alice"]["headers"])
        assert response.status_code == 200
        assert json.loads(response.data)["username"] == "bob"

    def test_get_missing_user(self, client: Flask.test_client, users):
        response = client.get("/api/v1/users/9999", headers=users["alice"]["headers"])
        assert response.status_code == 404

    def test_update_own_profile(self, client: Flask.test_client, users):
        response = client.patch(
            f"/api/v1/users/{users['alice']['id']}",
            json={"nickname": "Al"},
            headers=users["alice"]["headers"],
        )
        assert response.status_code == 200
        assert json.loads(response.data)["nickname"] == "Al"

    def test_cannot_update_other_profile(self, client: Flask.test_client, users):
        response = client.patch(
            f"/api/v1/users/{users['bob']['id']}",
            json={"nickname": "Bobby"},
            headers=users["alice"]["headers"],
        )
        assert response.status_code == 403

    def test_role_field_is_not_self_service(self, client: Flask.test_client, users):
        client.patch(
            f"/api/v1/users/{users['alice']['id']}",
            json={"role": "HOST"},
            headers=users["alice"]["headers"],
        )
        response = client.get(f"/api/v1/users/{users['alice']['id']}", headers=users["alice"]["headers"])
        assert json.loads(response.data)["role"] == "USER"


class TestRoleEndpoint:

    def test_host_grants_admin(self, client: Flask.test_client, users):
        response = client.put(
            f"/api/v1/users/{users['alice']['id']}/role",
            json={"role": "ADMIN"},
            headers=users["host"]["headers"],
        )
        assert response.status_code == 200
        assert json.loads(response.data)["role"] == "ADMIN"

    def test_user_cannot_grant_roles(self, client: Flask.test_client, users):
        response = client.put(
            f"/api/v1/users/{users['alice']['id']}/role",
            json={"role": "ADMIN"},
            headers=users["alice"]["headers"],
        )
        assert response.status_code == 403

    def test_host_role_cannot_be_assigned(self, client: Flask.test_client, users):
        response = client.put(
            f"/api/v1/users/{users['alice']['id']}/role",
            json={"role": "HOST"},
            headers=users["host"]["headers"],
        )
        assert response.status_code == 403

    def test_missing_user(self, client: Flask.test_client, users):
        response = client.put(
            "/api/v1/users/9999/role",
            json={"role": "ADMIN"},
            headers=users["host"]["headers"],
        )
        assert response.status_code == 404

    def test_host_cannot_demote_self(self, client: Flask.test_client, users):
        response = client.put(
            f"/api/v1/users/{users['host']['id']}/role",
            json={"role": "USER"},
            headers=users["host"]["headers"],
        )
        assert response.status_code == 403
        assert json.loads(response.data)["error"]["message"] == "HOST role cannot be changed"

        response = client.get("/auth/me", headers=users["host"]["headers"])
        assert json.loads(response.data)["role"] == "HOST"

    def test_host_stays_unique_when_signup_disabled(self, client: Flask.test_client, users):
        """A refused self-demotion leaves signup closed to newcomers."""
        original = settings.allow_signup
        settings.allow_signup = False
        try:
            client.put(
                f"/api/v1/users/{users['host']['id']}/role",
                json={"role": "ADMIN"},
                headers=users["host"]["headers"],
            )
            response = client.post(
                "/auth/signup",
                json={"username": "mallory", "password": "SecurePass123"}
            )
            assert response.status_code == 403
        finally:
            settings.allow_signup = original


class TestStaleTokens:
    """Tokens carry a role claim, but the stored user decides."""

    def _grant(self, client, users, role):
        response = client.put(
            f"/api/v1/users/{users['alice']['id']}/role",
            json={"role": role},
            headers=users["host"]["headers"],
        )
        assert response.status_code == 200

    def test_demoted_admin_loses_admin_rights(self, client: Flask.test_client, users):
        self._grant(client, users, "ADMIN")
        login = client.post(
            "/auth/login",
            json={"username": "alice", "password": "SecurePass123"}
        )
        admin_headers = {"Authorization": f"Bearer {json.loads(login.data)['access_token']}"}

        response = client.put(
            "/api/v1/settings/system/motd", json={"value": "hello"}, headers=admin_headers
        )
        assert response.status_code == 200

        self._grant(client, users, "USER")

        response = client.put(
            "/api/v1/settings/system/motd", json={"value": "still here"}, headers=admin_headers
        )
        assert response.status_code == 403

    def test_promotion_applies_to_existing_token(self, client: Flask.test_client, users):
        self._grant(client, users, "ADMIN")
        response = client.put(
            "/api/v1/settings/system/motd",
            json={"value": "hello"},
            headers=users["alice"]["headers"],
        )
        assert response.status_code == 200

    def test_archived_user_token_rejected(self, client: Flask.test_client, users):
        core = get_core()
        try:
            core._conn.execute(
                "UPDATE \"user\" SET row_status = 'ARCHIVED' WHERE id = ?",
                (users["alice"]["id"],)
            )
            core._conn.commit()
        finally:
            core.close()

        response = client.get("/api/v1/memos", headers=users["alice"]["headers"])
        assert response.status_code == 401
        assert json.loads(response.data)["error"]["details"] == {"code": "inactive_user"}
