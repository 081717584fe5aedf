"""
VidHub Middleware.
"""

from vidhub.middleware.auth import AuthContext, AuthMiddleware

__all__ = [
    "AuthContext",
    "AuthMiddleware",
]
