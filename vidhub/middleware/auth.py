"""
Authentication gate for protected routes.

Validates access tokens and resolves the caller's identity. The identity
is returned as an ``AuthContext`` value and passed to handlers through a
dependency; nothing is attached to the request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Request
from pymongo.errors import PyMongoError

from common.auth.base import InvalidTokenError, TokenClass, TokenProvider
from common.utils.result import Err, ErrorKind, Ok, Result, fail
from vidhub.user.models import to_public_user
from vidhub.user.services.user_store import UserStore

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "accessToken"


@dataclass(frozen=True)
class AuthContext:
    """Identity of an authenticated caller."""

    user_id: str
    user: Dict[str, Any]


def _unauthorized() -> Err:
    # Same kind, code and message for every rejection
    return fail(ErrorKind.UNAUTHORIZED, "Invalid or expired access token")


class AuthMiddleware:
    """
    Resolves an AuthContext from a cookie or bearer access token.
    """

    def __init__(self, user_store: UserStore, token_provider: TokenProvider):
        """
        Initialize AuthMiddleware.

        Args:
            user_store: For loading the token's user
            token_provider: For access token verification
        """
        self._store = user_store
        self._tokens = token_provider

    async def authenticate(self, request: Request) -> Result[AuthContext]:
        """
        Authenticate a request.

        Args:
            request: HTTP request object

        Returns:
            Ok(AuthContext) or Err(Unauthorized); Err(Internal) only when
            the store is unreachable
        """
        token = self._extract_token(request)
        if not token:
            logger.debug("Rejected request without access token")
            return _unauthorized()

        try:
            claims = self._tokens.verify(token, TokenClass.ACCESS)
        except InvalidTokenError as e:
            logger.debug(f"Rejected access token: {e}")
            return _unauthorized()

        try:
            user = await self._store.find_by_id(claims["sub"])
        except PyMongoError as e:
            logger.error(f"User lookup failed during authentication: {e}")
            return fail(ErrorKind.INTERNAL, "Internal server error")

        if not user:
            logger.debug("Rejected access token for missing user")
            return _unauthorized()

        return Ok(AuthContext(user_id=str(user["_id"]), user=to_public_user(user)))

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract the access token, preferring the cookie over the header.

        Expected header format: "Authorization: Bearer <token>"
        """
        cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        if cookie_token:
            return cookie_token

        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return None

        parts = auth_header.split()

        if len(parts) != 2:
            return None

        scheme, token = parts

        if scheme.lower() != "bearer":
            return None

        return token
