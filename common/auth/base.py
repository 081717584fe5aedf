"""
Abstract token provider interface.

Defines the contract that token issuers must implement so that session
logic never depends on a specific signing library.

Example:
    from common.auth import TokenProvider, JWTTokenIssuer, TokenClass

    def get_token_provider(settings) -> TokenProvider:
        return JWTTokenIssuer(
            access_secret=settings.ACCESS_TOKEN_SECRET,
            refresh_secret=settings.REFRESH_TOKEN_SECRET,
        )
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict


class TokenClass(str, Enum):
    """Which signing key a token belongs to."""

    ACCESS = "access"
    REFRESH = "refresh"


class InvalidTokenError(ValueError):
    """Raised when a token is malformed, tampered, expired or of the wrong class."""


class TokenSigningError(RuntimeError):
    """Raised when a token cannot be signed."""


class TokenProvider(ABC):
    """
    Abstract token issuer.

    Access and refresh tokens must be signed with distinct keys so that
    one can never be verified as the other.
    """

    @abstractmethod
    def issue_access_token(self, user: Dict[str, Any]) -> str:
        """
        Create a short-lived access token.

        Args:
            user: User record; must contain ``_id``. ``email``, ``username``
                and ``fullName`` are embedded when present.

        Returns:
            Signed token string
        """
        pass

    @abstractmethod
    def issue_refresh_token(self, user_id: str) -> str:
        """
        Create a long-lived refresh token.

        Args:
            user_id: The user's ID

        Returns:
            Signed token string
        """
        pass

    @abstractmethod
    def verify(self, token: str, key_class: TokenClass) -> Dict[str, Any]:
        """
        Verify a token against the key of the given class.

        Args:
            token: Token to verify
            key_class: TokenClass.ACCESS or TokenClass.REFRESH

        Returns:
            Decoded claims (at minimum ``sub``)

        Raises:
            InvalidTokenError: If the token is invalid, expired or of another class
        """
        pass
