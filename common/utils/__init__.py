"""
Utilities module - Result values, API responses and exceptions.
"""

from common.utils.responses import success_response, error_response
from common.utils.result import Ok, Err, ErrorKind, Result, ServiceError, fail
from common.utils.exceptions import (
    APIException,
    ValidationException,
    ConflictException,
    UnauthorizedException,
    NotFoundException,
    InternalServerException,
    unwrap,
)

__all__ = [
    "success_response",
    "error_response",
    "Ok",
    "Err",
    "ErrorKind",
    "Result",
    "ServiceError",
    "fail",
    "APIException",
    "ValidationException",
    "ConflictException",
    "UnauthorizedException",
    "NotFoundException",
    "InternalServerException",
    "unwrap",
]
