"""
tests/test_auth_redirect.py -- Integration tests for the page auth redirect chain.

These tests exercise _require_auth() end-to-end through the real ASGI stack
(follow_redirects=False). We assert on redirect Location headers directly --
following the redirect would hide them.

Coverage:
  - No session -> 302 /signin?next={path}
  - Valid access cookie -> 200
  - Expired access cookie + refresh cookie -> provider refresh, 302 back to
    the same path with new cookies
  - Failed refresh -> 302 /signin with notice=expired, both cookies cleared
  - /signin and /register bounce signed-in users to /dashboard
"""

from __future__ import annotations

from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from auth.models import AuthSession, AuthUser
from auth.provider import AuthProviderError
from conftest import make_session, make_token


def _set_cookie_headers(resp) -> list[str]:
    return [v for k, v in resp.headers.multi_items() if k.lower() == "set-cookie"]


class TestDashboardRedirects:
    def test_unauthenticated_redirects_to_signin(self, client: TestClient, auth_client: MagicMock) -> None:
        resp = client.get("/dashboard")
        assert resp.status_code == 302
        location = resp.headers["location"]
        assert urlparse(location).path == "/signin"
        assert parse_qs(urlparse(location).query)["next"] == ["/dashboard"]
        auth_client.refresh_session.assert_not_called()

    def test_valid_session_renders_dashboard(self, client: TestClient) -> None:
        token = make_token(email="ada@example.com")
        resp = client.get("/dashboard", cookies={"sb-access-token": token})
        assert resp.status_code == 200
        assert "ada@example.com" in resp.text
        assert "Sign out" in resp.text

    def test_tampered_token_is_rejected(self, client: TestClient) -> None:
        token = make_token(secret="x" * 40)
        resp = client.get("/dashboard", cookies={"sb-access-token": token})
        assert resp.status_code == 302

    def test_expired_session_is_refreshed(self, client: TestClient, auth_client: MagicMock) -> None:
        auth_client.refresh_session.return_value = make_session()
        resp = client.get(
            "/dashboard",
            cookies={"sb-access-token": make_token(expires_in=-60), "sb-refresh-token": "refresh-old"},
        )
        assert resp.status_code == 302
        assert resp.headers["location"] == "/dashboard"
        auth_client.refresh_session.assert_called_once_with("refresh-old")
        cookies = _set_cookie_headers(resp)
        assert any(c.startswith("sb-access-token=") and "max-age=0" not in c.lower() for c in cookies)

    def test_failed_refresh_clears_cookies(self, client: TestClient, auth_client: MagicMock) -> None:
        auth_client.refresh_session.side_effect = AuthProviderError("Invalid Refresh Token", 400)
        resp = client.get("/dashboard", cookies={"sb-refresh-token": "refresh-old"})
        assert resp.status_code == 302
        query = parse_qs(urlparse(resp.headers["location"]).query)
        assert query["next"] == ["/dashboard"]
        assert query["notice"] == ["expired"]
        cleared = _set_cookie_headers(resp)
        assert any(c.startswith("sb-refresh-token=") and "max-age=0" in c.lower() for c in cleared)

    def test_refreshed_token_that_fails_verification_does_not_loop(
        self, client: TestClient, auth_client: MagicMock
    ) -> None:
        auth_client.refresh_session.return_value = AuthSession(
            access_token=make_token(secret="y" * 40),
            refresh_token="r2",
            expires_in=3600,
            user=AuthUser(id="user-123"),
        )
        resp = client.get("/dashboard", cookies={"sb-refresh-token": "refresh-old"})
        assert resp.status_code == 302
        assert urlparse(resp.headers["location"]).path == "/signin"


class TestSignedInBounce:
    def test_signin_page_redirects_when_signed_in(self, client: TestClient) -> None:
        resp = client.get("/signin", cookies={"sb-access-token": make_token()})
        assert resp.status_code == 302
        assert resp.headers["location"] == "/dashboard"

    def test_register_page_redirects_when_signed_in(self, client: TestClient) -> None:
        resp = client.get("/register", cookies={"sb-access-token": make_token()})
        assert resp.status_code == 302

    def test_signin_page_renders_form(self, client: TestClient) -> None:
        resp = client.get("/signin", params={"next": "/todos"})
        assert resp.status_code == 200
        assert 'hx-post="/api/auth/signin"' in resp.text
        assert 'value="/todos"' in resp.text

    def test_signin_notice_is_whitelisted(self, client: TestClient) -> None:
        resp = client.get("/signin", params={"notice": "check_email"})
        assert "Check your email" in resp.text
        resp = client.get("/signin", params={"notice": "<script>x</script>"})
        assert "<script>x</script>" not in resp.text
        assert 'role="alert"' not in resp.text
