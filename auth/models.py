"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors core/models.py
-- dataclasses own domain shape; the provider client and routes do the work.

Layer rule: no imports from api/, web/, or todos/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AuthUser:
    """An identity as reported by the auth provider.

    id is the provider's stable subject (the JWT "sub" claim); email may be
    empty for providers that issue tokens without one.
    """

    id: str
    email: str = ""


@dataclass
class AuthSession:
    """Tokens returned by a successful sign-in, sign-up, or refresh.

    access_token is a short-lived HS256 JWT verified locally by
    auth.tokens.decode_access_token(). refresh_token is opaque and only ever
    sent back to the provider.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    user: AuthUser
