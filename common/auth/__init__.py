"""
Authentication module - token issuing and password hashing.
"""

from common.auth.base import (
    InvalidTokenError,
    TokenClass,
    TokenProvider,
    TokenSigningError,
)
from common.auth.jwt_auth import JWTTokenIssuer
from common.auth.password import PasswordHasher

__all__ = [
    "InvalidTokenError",
    "TokenSigningError",
    "TokenClass",
    "TokenProvider",
    "JWTTokenIssuer",
    "PasswordHasher",
]
