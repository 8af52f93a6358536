"""Endpoint tests for registration, login, token exchange and password updates."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from storerate.models.refresh_token import RefreshToken
from tests.helpers.assertions import assert_json_keys, assert_problem
from tests.helpers.auth import expired_token
from tests.helpers.http import build_url, json_headers

REGISTER = build_url("/register")
LOGIN = build_url("/login")
REFRESH = build_url("/refresh-token")
LOGOUT = build_url("/logout")
UPDATE_PASSWORD = build_url("/auth/update-password")


def _payload(**overrides):
    data = {
        "name": "Jordan Smith Two",
        "email": "jordan@example.com",
        "password": "Secret@123",
        "address": "1 Main Street",
    }
    data.update(overrides)
    return data


class TestRegister:
    def test_returns_user_and_token_pair(self, client):
        resp = client.post(REGISTER, json=_payload())

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert_json_keys(data, {"user", "access_token", "refresh_token", "token_type"})
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "jordan@example.com"
        assert data["user"]["role"] == "user"
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]

    @pytest.mark.parametrize(
        ("overrides", "detail"),
        [
            ({"name": "Abcd"}, "Name must be 5-60 characters"),
            ({"password": "alllowercase1"}, "Password: 8-16 chars, 1 uppercase, 1 special character"),
            ({"email": "jordan@localhost"}, "Email format looks invalid"),
            ({"address": "x" * 401}, "Address too long"),
            ({"role": "admin"}, "Role must be user or store_owner"),
        ],
    )
    def test_rule_violations_are_400(self, client, overrides, detail):
        resp = client.post(REGISTER, json=_payload(**overrides))

        assert_problem(resp, 400, detail)

    @pytest.mark.parametrize("missing", ["name", "email", "password"])
    def test_missing_fields_fail_schema_validation(self, client, missing):
        payload = _payload()
        payload.pop(missing)

        assert_problem(client.post(REGISTER, json=payload), 400, missing, code="validation_error")

    def test_unknown_role_fails_schema_validation(self, client):
        resp = client.post(REGISTER, json=_payload(role="superuser"))

        assert_problem(resp, 400, code="validation_error")

    def test_duplicate_email_is_400_conflict(self, client, member):
        resp = client.post(REGISTER, json=_payload(email=member.email.upper()))

        assert_problem(resp, 400, "Email already exists", code="conflict")


class TestLogin:
    def test_success(self, client, member):
        resp = client.post(LOGIN, json={"email": member.email, "password": "Secret@123"})

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["user"]["id"] == member.id
        assert data["access_token"] and data["refresh_token"]

    @pytest.mark.parametrize(
        "creds",
        [
            {"password": "Wrong@123"},
            {"email": "nobody@example.com"},
        ],
    )
    def test_bad_credentials_are_401(self, client, member, creds):
        body = {"email": member.email, "password": "Secret@123", **creds}

        assert_problem(client.post(LOGIN, json=body), 401, "Invalid credentials")


class TestRefreshAndLogout:
    def _tokens(self, client):
        return client.post(REGISTER, json=_payload()).get_json()["data"]

    def test_refresh_issues_new_access_token(self, client):
        tokens = self._tokens(client)

        resp = client.post(REFRESH, json={"refreshToken": tokens["refresh_token"]})

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["access_token"]
        assert data["token_type"] == "bearer"
        assert client.get(build_url("/stores"), headers=json_headers(data["access_token"])).status_code == 200

    def test_missing_refresh_token_is_401(self, client):
        assert_problem(client.post(REFRESH, json={}), 401, "Refresh token required")

    def test_unknown_refresh_token_is_403(self, client):
        assert_problem(
            client.post(REFRESH, json={"refreshToken": "not.a.token"}),
            403,
            "Invalid or expired token, please re-authenticate",
        )

    def test_logout_revokes_then_refresh_is_403(self, client, session):
        tokens = self._tokens(client)

        resp = client.post(LOGOUT, json={"refreshToken": tokens["refresh_token"]})

        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Logged out successfully"}
        assert session.execute(select(func.count(RefreshToken.id))).scalar_one() == 0
        assert_problem(client.post(REFRESH, json={"refreshToken": tokens["refresh_token"]}), 403)

    @pytest.mark.parametrize(
        "body",
        [{}, {"refreshToken": "never-issued"}, {"refreshToken": 123}, {"refreshToken": ["x"]}, None],
    )
    def test_logout_always_succeeds(self, client, body):
        resp = client.post(LOGOUT, json=body) if body is not None else client.post(LOGOUT)

        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Logged out successfully"


class TestAccessTokenGuard:
    def test_no_token_is_401(self, client):
        assert_problem(client.get(build_url("/stores")), 401, "Access denied, no token provided")

    def test_garbage_token_is_403(self, client):
        resp = client.get(build_url("/stores"), headers=json_headers("garbage"))

        assert_problem(resp, 403, "Invalid or expired token, please re-authenticate")

    def test_expired_token_is_403(self, client, session):
        from tests.factories.user import UserFactory

        user = UserFactory()
        session.commit()
        token = expired_token(user)

        resp = client.get(build_url("/stores"), headers=json_headers(token))

        assert_problem(resp, 403, "Invalid or expired token, please re-authenticate")

    def test_refresh_token_is_not_an_access_token(self, client):
        tokens = client.post(REGISTER, json=_payload()).get_json()["data"]

        resp = client.get(build_url("/stores"), headers=json_headers(tokens["refresh_token"]))

        assert_problem(resp, 403)


class TestUpdatePassword:
    def _body(self, user_id, current="Secret@123", new="Better#456"):
        return {"userId": user_id, "currentPassword": current, "newPassword": new}

    def test_success_then_login_with_new_password(self, client, member):
        resp = client.post(UPDATE_PASSWORD, json=self._body(member.id), headers=member.headers)

        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Password updated successfully"
        login = client.post(LOGIN, json={"email": member.email, "password": "Better#456"})
        assert login.status_code == 200

    def test_requires_token(self, client, member):
        assert_problem(client.post(UPDATE_PASSWORD, json=self._body(member.id)), 401)

    def test_missing_fields(self, client, member):
        resp = client.post(UPDATE_PASSWORD, json={"userId": member.id}, headers=member.headers)

        assert_problem(resp, 400, "Missing required fields")

    def test_unknown_user(self, client, member):
        resp = client.post(UPDATE_PASSWORD, json=self._body(999_999), headers=member.headers)

        assert_problem(resp, 404)

    def test_someone_elses_password_is_forbidden(self, client, member, admin):
        resp = client.post(UPDATE_PASSWORD, json=self._body(admin.id), headers=member.headers)

        assert_problem(resp, 403)

    def test_wrong_current_password(self, client, member):
        resp = client.post(
            UPDATE_PASSWORD, json=self._body(member.id, current="Wrong@123"), headers=member.headers
        )

        assert_problem(resp, 400, "Incorrect current password")

    def test_weak_new_password(self, client, member):
        resp = client.post(UPDATE_PASSWORD, json=self._body(member.id, new="weak"), headers=member.headers)

        assert_problem(resp, 400, "New Password: 8-16 chars, 1 uppercase, 1 special character")
