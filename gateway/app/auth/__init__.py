"""
Authentication Package

Token checks performed by the gateway itself. Sign-in, sign-out, token
refresh and profile calls are forwarded to the backend by the proxy
package; this package only verifies tokens the backend has issued.

Modules:
- tokens: access-token and password-reset-token verification (PyJWT)
- routes: /api/auth/verify-reset-token
"""

from .routes import auth_router

__all__ = [
    "auth_router",
]
