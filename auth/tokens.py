"""
auth/tokens.py -- Access token verification and session cookie helpers.

Security design decisions:
  JWT: python-jose with HS256. The auth provider signs access tokens with the
       project's JWT secret; we verify signature, expiry, and audience locally
       so a page view never needs a round trip to the provider. Verification
       returns None on any failure -- the route layer turns that into a
       redirect or a 401.

  Cookies: the provider's access and refresh tokens travel in two httpOnly
       cookies (sb-access-token / sb-refresh-token). The refresh token is
       never decoded here; it is opaque and only sent back to the provider.

  Secret: sourced from core.config.get_settings(). The Settings class
       validates it at startup: dev mode (DEBUG=true) auto-generates a random
       secret with a warning; production mode refuses to start without one.

Layer rule: no imports from api/, web/, or todos/. Import from core/
is allowed -- core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

from jose import JWTError, jwt

from auth.models import AuthSession, AuthUser
from core.config import get_settings

_settings = get_settings()

_ALGORITHM = "HS256"

ACCESS_COOKIE = "sb-access-token"
REFRESH_COOKIE = "sb-refresh-token"


# ---------------------------------------------------------------------------
# JWT decode
# ---------------------------------------------------------------------------


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a provider access token. Returns the payload or None.

    Returning None (rather than raising) keeps the caller simple: any invalid
    or expired token is treated as unauthenticated.
    """
    try:
        payload = jwt.decode(
            token,
            _settings.auth_jwt_secret,
            algorithms=[_ALGORITHM],
            audience=_settings.auth_jwt_audience,
        )
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload


def user_from_token(token: str) -> AuthUser | None:
    """Return the AuthUser carried by a valid access token, else None."""
    payload = decode_access_token(token)
    if payload is None:
        return None
    return AuthUser(id=str(payload["sub"]), email=payload.get("email") or "")


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_session_cookies(response, session: AuthSession) -> None:
    """Write both session cookies on the response.

    httponly=True: JS cannot read the cookies (XSS mitigation).
    samesite="lax": not sent on cross-site POST -- CSRF mitigation for the
        HTMX form endpoints.
    secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).
    max_age: the access cookie expires with its JWT; the refresh cookie lives
        for REFRESH_TOKEN_MAX_AGE so an expired session can be renewed.
    """
    response.set_cookie(
        ACCESS_COOKIE,
        value=session.access_token,
        path="/",
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        max_age=session.expires_in,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        value=session.refresh_token,
        path="/",
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        max_age=_settings.refresh_token_max_age,
    )


def clear_session_cookies(response) -> None:
    response.delete_cookie(ACCESS_COOKIE, path="/")
    response.delete_cookie(REFRESH_COOKIE, path="/")
