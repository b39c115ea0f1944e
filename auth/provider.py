"""
auth/provider.py -- Client for the external auth provider's REST API.

The provider is a GoTrue-compatible service (the auth API behind hosted
Postgres platforms). Credential checking, user storage, and token issuance
all live there; this module only translates between HTTP and AuthSession.

Endpoints used:
  POST /auth/v1/token?grant_type=password       -- password sign-in
  POST /auth/v1/token?grant_type=refresh_token  -- exchange refresh token
  POST /auth/v1/signup                          -- create account
  POST /auth/v1/logout                          -- revoke refresh tokens

Every request carries the project's public key in the `apikey` header.
Non-2xx responses raise AuthProviderError carrying the provider's own
message, which the sign-in route forwards to the error page.

Layer rule: no imports from api/, web/, or todos/. Import from core/
is allowed -- core/ is the kernel layer.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from auth.models import AuthSession, AuthUser
from core.config import Settings

logger = logging.getLogger("todoboard.auth.provider")

_UNAVAILABLE = "Authentication service is unavailable."
_NOT_CONFIGURED = "Authentication provider is not configured."


class AuthProviderError(Exception):
    """The provider rejected a request or could not be reached.

    status_code mirrors the provider's HTTP status (400/401/422 for bad
    credentials or input) or 503 when the provider is unreachable or
    unconfigured.
    """

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(resp: requests.Response) -> str:
    """Pull a human-readable message out of a provider error body.

    GoTrue has used several shapes over time:
      {"msg": "..."}                                      (current)
      {"error": "invalid_grant", "error_description": "..."}  (OAuth-style)
      {"message": "..."}                                  (gateway errors)
    """
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Authentication failed ({resp.status_code})."


def _parse_session(data: dict[str, Any]) -> AuthSession:
    user = data.get("user") or {}
    return AuthSession(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token", ""),
        expires_in=int(data.get("expires_in", 3600)),
        user=AuthUser(id=str(user.get("id", "")), email=user.get("email") or ""),
    )


class AuthProviderClient:
    """Blocking client for the auth provider. Call from sync route handlers.

    Usage:
        client = AuthProviderClient("https://xyz.example.co", "public-anon-key")
        session = client.sign_in_with_password("a@b.c", "secret")
        client.close()
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        # One session per client for connection pooling. max_redirects=3
        # replaces the requests default of 30 -- the provider never needs more.
        self._session = requests.Session()
        self._session.max_redirects = 3
        self._session.headers.update({"apikey": api_key, "Content-Type": "application/json"})

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthProviderClient":
        return cls(
            settings.auth_provider_url,
            settings.auth_provider_key,
            timeout=settings.auth_timeout_seconds,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _post(
        self,
        path: str,
        payload: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
        bearer: Optional[str] = None,
    ) -> dict[str, Any]:
        if not self.base_url:
            raise AuthProviderError(_NOT_CONFIGURED, 503)
        headers = {"Authorization": f"Bearer {bearer or self.api_key}"}
        try:
            resp = self._session.post(
                f"{self.base_url}/auth/v1/{path}",
                json=payload or {},
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Auth provider request to %s failed: %s", path, e)
            raise AuthProviderError(_UNAVAILABLE, 503) from e

        if not resp.ok:
            message = _error_message(resp)
            logger.info("Auth provider rejected %s (%d): %s", path, resp.status_code, message)
            raise AuthProviderError(message, resp.status_code)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise AuthProviderError(_UNAVAILABLE, 503) from e

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Exchange email + password for a session. Raises AuthProviderError."""
        data = self._post("token", {"email": email, "password": password}, params={"grant_type": "password"})
        return _parse_session(data)

    def sign_up(self, email: str, password: str) -> Optional[AuthSession]:
        """Create an account.

        Returns the new session, or None when the provider created the user
        but withholds a session until the email address is confirmed.
        """
        data = self._post("signup", {"email": email, "password": password})
        if not data.get("access_token"):
            return None
        return _parse_session(data)

    def refresh_session(self, refresh_token: str) -> AuthSession:
        """Trade a refresh token for a fresh session. Raises AuthProviderError."""
        data = self._post("token", {"refresh_token": refresh_token}, params={"grant_type": "refresh_token"})
        return _parse_session(data)

    def sign_out(self, access_token: str) -> None:
        """Revoke the session at the provider.

        Best-effort: the caller clears local cookies either way, so a failure
        here is logged rather than raised.
        """
        try:
            self._post("logout", bearer=access_token)
        except AuthProviderError as e:
            logger.warning("Provider sign-out failed: %s", e.message)

    def close(self) -> None:
        self._session.close()
