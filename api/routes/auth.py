"""
api/routes/auth.py -- Sign-in, registration, and sign-out endpoints.

Routes:
  POST /api/auth/signin    -- password sign-in via the provider; sets session cookies
  POST /api/auth/register  -- create account via the provider
  POST /api/auth/signout   -- revoke at the provider (best-effort); clear cookies
  GET  /api/auth/me        -- current user (requires auth)

These endpoints answer HTMX form posts, so outcomes are communicated through
headers rather than JSON bodies:
  HTMX request (HX-Request: true) -> the stated status + HX-Redirect header
  plain form post                 -> 303 See Other + Location header
The second branch keeps the forms usable without JavaScript.

Failures redirect to /api/error?message=..., which renders the message in
the alert fragment.

Security:
  Sign-in and register are rate-limited per client address (SIGNIN_RATE_LIMIT).
  Cache-Control: no-store on every response that touches session cookies.
  next= is accepted only as a server-local path (open-redirect guard).
"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request, Response
from fastapi.responses import RedirectResponse

from api.limiter import limiter
from api.models import MeResponse
from auth.dependencies import get_current_user
from auth.models import AuthUser
from auth.provider import AuthProviderClient, AuthProviderError
from auth.tokens import ACCESS_COOKIE, clear_session_cookies, set_session_cookies
from core.config import get_settings

logger = logging.getLogger("todoboard.api.auth")

_settings = get_settings()

router = APIRouter()

_MISSING_CREDENTIALS = "Email and password are required"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _safe_next(next_url: Optional[str], default: str = "/dashboard") -> str:
    """Validate a post-sign-in redirect target. Only accept relative paths.

    Rejects absolute URLs and protocol-relative URLs ("//host/..."), both of
    which would send the browser off-site after sign-in.
    """
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return default


def _is_htmx(request: Request) -> bool:
    return request.headers.get("HX-Request", "").lower() == "true"


def _redirect(request: Request, url: str, status_code: int = 200) -> Response:
    """Send the browser to url the way the caller can follow it.

    htmx acts on HX-Redirect regardless of status code, so error statuses
    are preserved for HTMX callers. Plain form posts get a 303 so the
    browser issues a GET to the target.
    """
    if _is_htmx(request):
        resp = Response(status_code=status_code, headers={"HX-Redirect": url})
    else:
        resp = RedirectResponse(url, status_code=303)
    resp.headers["Cache-Control"] = "no-store"
    return resp


def _error_redirect(request: Request, message: str, status_code: int) -> Response:
    return _redirect(request, f"/api/error?message={quote(message, safe='')}", status_code)


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/signin")
@limiter.limit(_settings.signin_rate_limit)
def signin(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
    next_url: str = Form(default="", alias="next"),
) -> Response:
    """Check credentials with the provider and start a cookie session."""
    email = email.strip()
    if not email or not password:
        return _error_redirect(request, _MISSING_CREDENTIALS, 400)

    client: AuthProviderClient = request.app.state.auth_client
    try:
        session = client.sign_in_with_password(email, password)
    except AuthProviderError as e:
        return _error_redirect(request, e.message, e.status_code)

    logger.info("User %s signed in", session.user.id or email)
    resp = _redirect(request, _safe_next(next_url))
    set_session_cookies(resp, session)
    return resp


@router.post("/auth/register")
@limiter.limit(_settings.signin_rate_limit)
def register(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
) -> Response:
    """Create an account with the provider.

    When the provider holds the session back pending email confirmation, the
    user is sent to /signin with a notice instead of the dashboard.
    """
    email = email.strip()
    if not email or not password:
        return _error_redirect(request, _MISSING_CREDENTIALS, 400)

    client: AuthProviderClient = request.app.state.auth_client
    try:
        session = client.sign_up(email, password)
    except AuthProviderError as e:
        return _error_redirect(request, e.message, e.status_code)

    if session is None:
        return _redirect(request, "/signin?notice=check_email")

    resp = _redirect(request, "/dashboard")
    set_session_cookies(resp, session)
    return resp


@router.post("/auth/signout")
def signout(request: Request) -> Response:
    """End the session locally and, when a token is present, at the provider."""
    access_token = request.cookies.get(ACCESS_COOKIE)
    if access_token:
        client: AuthProviderClient = request.app.state.auth_client
        client.sign_out(access_token)

    resp = _redirect(request, "/signin")
    clear_session_cookies(resp)
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
def me(user: AuthUser = Depends(get_current_user)) -> MeResponse:
    """Return the identity carried by the caller's access token."""
    return MeResponse(id=user.id, email=user.email)
