"""
api/limiter.py -- The one slowapi Limiter for the app.

Keyed by client address with in-memory counters. api/main.py registers it
on app.state for SlowAPIMiddleware; api/routes/auth.py applies
SIGNIN_RATE_LIMIT to sign-in and register. Tests call limiter.reset().
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
