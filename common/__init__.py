"""
Common library for reusable infrastructure components.

- database: Async MongoDB connection with Beanie ODM
- auth: JWT token issuing and bcrypt password hashing
- utils: Result values, standard responses, exceptions
- config: Base settings class
"""

from common.database import MongoDB
from common.auth import JWTTokenIssuer, PasswordHasher, TokenClass, TokenProvider
from common.utils import (
    success_response,
    error_response,
    Ok,
    Err,
    ErrorKind,
    Result,
    APIException,
    unwrap,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    # Auth
    "JWTTokenIssuer",
    "PasswordHasher",
    "TokenClass",
    "TokenProvider",
    # Utils
    "success_response",
    "error_response",
    "Ok",
    "Err",
    "ErrorKind",
    "Result",
    "APIException",
    "unwrap",
    # Config
    "BaseAppSettings",
]
