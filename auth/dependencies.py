"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two token sources are checked in priority order:
  1. sb-access-token cookie -- set by the sign-in flow for browsers.
  2. Authorization: Bearer <token> header -- API clients holding a provider JWT.

Both converge on an AuthUser after local verification.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from web/ or todos/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import AuthUser
from auth.tokens import ACCESS_COOKIE, user_from_token


def try_get_current_user(request: Request) -> AuthUser | None:
    """Attempt to authenticate the request via cookie or Bearer header.

    Returns the AuthUser on success, None on any failure. Never raises --
    callers that need a hard 401 should use get_current_user().
    """
    token: str | None = request.cookies.get(ACCESS_COOKIE)

    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]

    if not token:
        return None
    return user_from_token(token)


def get_current_user(request: Request) -> AuthUser:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: AuthUser = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
