"""auth/ -- Authentication package for Todoboard.

Credential checking is delegated to an external auth provider; this package
wraps its REST API, verifies the access tokens it issues, and manages the
session cookies that carry them.

Layer rule: auth/ imports only stdlib + third-party libraries and core/.
It does NOT import from api/, web/, or todos/.
api/ and web/ import from auth/, not the other way around.
"""
