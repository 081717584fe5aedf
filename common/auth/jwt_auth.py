"""
JWT token issuer.

Issues and verifies HS256-signed access and refresh tokens using
python-jose. Each token class has its own secret and lifetime.

Example:
    issuer = JWTTokenIssuer(
        access_secret="access-secret",
        refresh_secret="refresh-secret",
        access_token_expire_minutes=15,
        refresh_token_expire_days=10,
    )

    token = issuer.issue_access_token({"_id": user_id, "email": "ada@x.com"})
    claims = issuer.verify(token, TokenClass.ACCESS)
    print(claims["sub"])  # user_id
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

from jose import jwt, JWTError

from common.auth.base import (
    InvalidTokenError,
    TokenClass,
    TokenProvider,
    TokenSigningError,
)


class JWTTokenIssuer(TokenProvider):
    """
    JWT access/refresh token issuer.

    Token storage is not handled here; the session layer persists the
    current refresh token on the user record.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 15,
        refresh_token_expire_days: int = 10,
    ):
        """
        Initialize the issuer.

        Args:
            access_secret: Secret used to sign access tokens
            refresh_secret: Secret used to sign refresh tokens (must differ)
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Access token lifetime
            refresh_token_expire_days: Refresh token lifetime
        """
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")

        self.algorithm = algorithm
        self._secrets = {
            TokenClass.ACCESS: access_secret,
            TokenClass.REFRESH: refresh_secret,
        }
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)
        self.refresh_token_expire = timedelta(days=refresh_token_expire_days)

    def _encode(self, key_class: TokenClass, user_id: str, lifetime: timedelta, **claims: Any) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "_id": user_id,
            "type": key_class.value,
            "iat": now,
            "exp": now + lifetime,
            **claims,
        }
        try:
            return jwt.encode(payload, self._secrets[key_class], algorithm=self.algorithm)
        except JWTError as e:
            raise TokenSigningError(f"Failed to sign {key_class.value} token: {e}")

    def issue_access_token(self, user: Dict[str, Any]) -> str:
        """Create an access token carrying the user's public identity."""
        claims = {
            key: user[key]
            for key in ("email", "username", "fullName")
            if user.get(key) is not None
        }
        return self._encode(
            TokenClass.ACCESS,
            str(user["_id"]),
            self.access_token_expire,
            **claims,
        )

    def issue_refresh_token(self, user_id: str) -> str:
        """Create a refresh token; ``jti`` keeps tokens minted in the same second distinct."""
        return self._encode(
            TokenClass.REFRESH,
            str(user_id),
            self.refresh_token_expire,
            jti=secrets.token_urlsafe(16),
        )

    def verify(self, token: str, key_class: TokenClass) -> Dict[str, Any]:
        """Verify and decode a token of the given class."""
        if not token:
            raise InvalidTokenError("Token is empty")

        try:
            payload = jwt.decode(
                token,
                self._secrets[key_class],
                algorithms=[self.algorithm],
            )
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        if payload.get("type") != key_class.value:
            raise InvalidTokenError("Token class mismatch")

        if not payload.get("sub"):
            raise InvalidTokenError("Token missing user ID")

        return payload
