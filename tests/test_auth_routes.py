"""
tests/test_auth_routes.py -- Integration tests for the auth and profile routes.

These tests exercise the full stack: FastAPI routing -> session dependency ->
SessionManager -> UserStore -> response model serialization, in both session
modes.

Coverage:
  - Register: 200 + cookie, duplicate 409 without a second row, missing fields 400
  - Login: 200 + cookie, wrong password and unknown email give identical 401 bodies
  - /me: 401 without a session, 200 without password hash, 404 when the user is gone
  - Token mode: Bearer header fallback, expired/forged tokens rejected, cookie attributes
  - Cookie mode: user_email cookie attributes, X-User-Email header fallback
  - /profile: flattened snake_case shape with empty-string defaults
  - Logout: clears both cookies in either mode, idempotent

Fixtures used (from conftest.py):
  - token_client:  (client, user_store, analysis_store) -- JWT mode, https base URL
  - cookie_client: (client, user_store, analysis_store) -- plain-cookie mode
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from conftest import TEST_SECRET

from auth.tokens import create_access_token, decode_access_token

DOCTOR = {
    "fullName": "Dr. Ada Byrne",
    "doctorId": "D-1001",
    "email": "a@x.com",
    "password": "p1",
    "hospitalName": "St. Mary's",
    "area": "Oncology",
}


def _set_cookies(resp) -> list[str]:
    return resp.headers.get_list("set-cookie")


def _cookie_header(resp, name: str) -> str:
    matches = [h for h in _set_cookies(resp) if h.startswith(f"{name}=")]
    assert matches, f"No Set-Cookie for {name}: {_set_cookies(resp)}"
    return matches[0]


def _register(client, **overrides):
    return client.post("/api/auth/register", json={**DOCTOR, **overrides})


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_returns_summary_and_sets_cookie(self, token_client) -> None:
        client, user_store, _ = token_client
        resp = _register(client)
        assert resp.status_code == 200, resp.text
        user = resp.json()["user"]
        assert user["email"] == "a@x.com"
        assert user["fullName"] == "Dr. Ada Byrne"
        assert isinstance(user["id"], int)
        assert set(user) == {"id", "email", "fullName"}
        assert _cookie_header(resp, "token")
        assert user_store.count_users() == 1

    def test_duplicate_email_returns_409_without_second_record(self, token_client) -> None:
        client, user_store, _ = token_client
        assert _register(client).status_code == 200
        client.cookies.clear()

        resp = _register(client, password="different")
        assert resp.status_code == 409
        assert resp.json() == {"message": "User already exists"}
        assert user_store.count_users() == 1
        assert "set-cookie" not in resp.headers

    def test_missing_password_returns_400(self, cookie_client) -> None:
        client, user_store, _ = cookie_client
        resp = client.post("/api/auth/register", json={"email": "a@x.com"})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Email and password are required"}
        assert user_store.count_users() == 0

    def test_empty_email_returns_400(self, cookie_client) -> None:
        client, _, _ = cookie_client
        resp = client.post("/api/auth/register", json={"email": "", "password": "p1"})
        assert resp.status_code == 400

    def test_optional_profile_fields_may_be_omitted(self, cookie_client) -> None:
        client, user_store, _ = cookie_client
        resp = client.post("/api/auth/register", json={"email": "b@x.com", "password": "p2"})
        assert resp.status_code == 200
        assert resp.json()["user"]["fullName"] is None
        stored = user_store.get_by_email("b@x.com")
        assert stored is not None
        assert stored.password_hash != "p2"


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


class TestLogin:
    def test_login_valid_credentials(self, token_client) -> None:
        client, _, _ = token_client
        registered = _register(client).json()["user"]
        client.cookies.clear()

        resp = client.post("/api/auth/login", json={"email": "a@x.com", "password": "p1"})
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"user": registered}
        assert resp.headers["cache-control"] == "no-store"
        assert _cookie_header(resp, "token")

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, token_client) -> None:
        client, _, _ = token_client
        _register(client)
        client.cookies.clear()

        wrong_password = client.post("/api/auth/login", json={"email": "a@x.com", "password": "wrong"})
        unknown_email = client.post("/api/auth/login", json={"email": "nobody@x.com", "password": "p1"})

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {"message": "Invalid credentials"}
        assert "set-cookie" not in wrong_password.headers

    def test_login_without_body_fields_is_401(self, cookie_client) -> None:
        client, _, _ = cookie_client
        resp = client.post("/api/auth/login", json={})
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid credentials"}


# ---------------------------------------------------------------------------
# Token mode identity
# ---------------------------------------------------------------------------


class TestTokenMode:
    def test_me_without_session_is_401(self, token_client) -> None:
        client, _, _ = token_client
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"message": "Not authenticated"}

    def test_me_after_register_omits_password_hash(self, token_client) -> None:
        client, _, _ = token_client
        _register(client)
        resp = client.get("/api/auth/me")
        assert resp.status_code == 200, resp.text
        user = resp.json()["user"]
        assert user["email"] == "a@x.com"
        assert user["doctorId"] == "D-1001"
        assert user["hospitalName"] == "St. Mary's"
        assert "passwordHash" not in user
        assert "password_hash" not in user
        assert not any("password" in key.lower() for key in user)

    def test_token_cookie_attributes(self, token_client) -> None:
        client, _, _ = token_client
        header = _cookie_header(_register(client), "token").lower()
        assert "httponly" in header
        assert "secure" in header
        assert "samesite=none" in header
        assert "max-age=604800" in header

    def test_issued_token_carries_registered_id(self, token_client) -> None:
        client, _, _ = token_client
        user_id = _register(client).json()["user"]["id"]
        payload = decode_access_token(client.cookies.get("token"), TEST_SECRET)
        assert payload is not None
        assert payload["id"] == user_id
        assert payload["email"] == "a@x.com"
        assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60

    def test_bearer_header_is_accepted(self, token_client) -> None:
        client, _, _ = token_client
        token = _register(client).cookies.get("token") or client.cookies.get("token")
        client.cookies.clear()
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "a@x.com"

    def test_expired_token_is_rejected(self, token_client) -> None:
        client, user_store, _ = token_client
        user_id = _register(client).json()["user"]["id"]
        client.cookies.clear()
        issued = datetime.now(timezone.utc) - timedelta(days=7, minutes=1)
        expired = create_access_token(user_id, "a@x.com", TEST_SECRET, now=issued)

        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid or expired token"}

    def test_six_day_old_token_is_still_valid(self, token_client) -> None:
        client, _, _ = token_client
        user_id = _register(client).json()["user"]["id"]
        client.cookies.clear()
        issued = datetime.now(timezone.utc) - timedelta(days=6)
        token = create_access_token(user_id, "a@x.com", TEST_SECRET, now=issued)
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200

    def test_token_signed_with_other_secret_is_rejected(self, token_client) -> None:
        client, _, _ = token_client
        user_id = _register(client).json()["user"]["id"]
        client.cookies.clear()
        forged = create_access_token(user_id, "a@x.com", "some-other-secret-0123456789abcdef")
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_email_header_is_ignored_in_token_mode(self, token_client) -> None:
        client, _, _ = token_client
        _register(client)
        client.cookies.clear()
        resp = client.get("/api/auth/me", headers={"X-User-Email": "a@x.com"})
        assert resp.status_code == 401

    def test_deleted_user_is_404(self, token_client) -> None:
        client, user_store, _ = token_client
        user_id = _register(client).json()["user"]["id"]
        assert user_store.delete_user(user_id)
        resp = client.get("/api/auth/me")
        assert resp.status_code == 404
        assert resp.json() == {"message": "User not found"}


# ---------------------------------------------------------------------------
# Cookie mode identity
# ---------------------------------------------------------------------------


class TestCookieMode:
    def test_me_without_session_is_401(self, cookie_client) -> None:
        client, _, _ = cookie_client
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"message": "Not authenticated"}

    def test_register_sets_plain_email_cookie(self, cookie_client) -> None:
        client, _, _ = cookie_client
        resp = _register(client)
        header = _cookie_header(resp, "user_email").lower()
        assert "httponly" not in header
        assert "samesite=lax" in header
        assert "max-age" not in header
        assert not any(h.startswith("token=") for h in _set_cookies(resp))

    def test_me_after_login_uses_cookie(self, cookie_client) -> None:
        client, _, _ = cookie_client
        _register(client)
        client.cookies.clear()
        assert client.post("/api/auth/login", json={"email": "a@x.com", "password": "p1"}).status_code == 200
        resp = client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "a@x.com"

    def test_email_header_fallback(self, cookie_client) -> None:
        client, _, _ = cookie_client
        _register(client)
        client.cookies.clear()
        resp = client.get("/api/auth/me", headers={"X-User-Email": "a@x.com"})
        assert resp.status_code == 200
        assert "passwordHash" not in resp.json()["user"]

    def test_unknown_email_is_404(self, cookie_client) -> None:
        client, _, _ = cookie_client
        resp = client.get("/api/auth/me", headers={"X-User-Email": "ghost@x.com"})
        assert resp.status_code == 404
        assert resp.json() == {"message": "User not found"}

    def test_bearer_header_is_ignored_in_cookie_mode(self, cookie_client) -> None:
        client, _, _ = cookie_client
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer whatever"})
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class TestProfile:
    def test_profile_requires_session(self, token_client) -> None:
        client, _, _ = token_client
        resp = client.get("/api/profile")
        assert resp.status_code == 401

    def test_profile_shape(self, token_client) -> None:
        client, _, _ = token_client
        _register(client)
        resp = client.get("/api/profile")
        assert resp.status_code == 200
        assert resp.json() == {
            "full_name": "Dr. Ada Byrne",
            "doctor_id": "D-1001",
            "email": "a@x.com",
            "hospital_name": "St. Mary's",
            "area": "Oncology",
            "profile_picture": "",
        }

    def test_profile_defaults_to_empty_strings(self, cookie_client) -> None:
        client, _, _ = cookie_client
        client.post("/api/auth/register", json={"email": "b@x.com", "password": "p2"})
        resp = client.get("/api/profile")
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == "b@x.com"
        assert data["full_name"] == data["doctor_id"] == data["area"] == ""


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------


class TestLogout:
    def _assert_both_cleared(self, resp) -> None:
        token = _cookie_header(resp, "token").lower()
        email = _cookie_header(resp, "user_email").lower()
        assert "max-age=0" in token
        assert "samesite=none" in token
        assert "secure" in token
        assert "max-age=0" in email

    def test_logout_clears_both_cookies_in_token_mode(self, token_client) -> None:
        client, _, _ = token_client
        _register(client)
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        self._assert_both_cleared(resp)
        assert client.get("/api/auth/me").status_code == 401

    def test_logout_clears_both_cookies_in_cookie_mode(self, cookie_client) -> None:
        client, _, _ = cookie_client
        _register(client)
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200
        self._assert_both_cleared(resp)
        assert client.get("/api/auth/me").status_code == 401

    def test_logout_without_session_is_idempotent(self, cookie_client) -> None:
        client, _, _ = cookie_client
        first = client.post("/api/auth/logout")
        second = client.post("/api/auth/logout")
        assert first.status_code == second.status_code == 200
        assert second.json() == {"ok": True}
