"""
Custom HTTP exceptions with error codes.

Extends FastAPI's HTTPException with standardized error codes
for consistent API error responses. Services never raise these; they
return ``Err`` values which ``unwrap`` converts at the route boundary.

Example:
    from common.utils.exceptions import unwrap

    @router.get("/current-user")
    async def current_user(auth: AuthContext = Depends(require_auth)):
        user = unwrap(await session_manager.current_user(auth.user_id))
        return success_response(user)
"""

from typing import Any, Dict, NoReturn, Optional, TypeVar

from fastapi import HTTPException

from common.utils.result import Err, ErrorKind, Result, ServiceError

T = TypeVar("T")


class APIException(HTTPException):
    """
    Base API exception with error code support.

    Provides consistent error response format across the API.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Create an API exception.

        Args:
            status_code: HTTP status code
            message: Human-readable error message
            code: Machine-readable error code
            headers: Optional response headers
        """
        detail: Dict[str, Any] = {"message": message}

        if code:
            detail["code"] = code

        super().__init__(
            status_code=status_code,
            detail=detail,
            headers=headers,
        )

    @property
    def message(self) -> str:
        return self.detail["message"]

    @property
    def code(self) -> Optional[str]:
        return self.detail.get("code")


class ValidationException(APIException):
    """400 Bad Request - Missing or malformed input."""

    def __init__(
        self,
        message: str = "Validation error",
        code: str = "VALIDATION_ERROR",
    ):
        super().__init__(400, message, code)


class ConflictException(APIException):
    """400 Bad Request - Resource already exists (uniqueness violation)."""

    def __init__(
        self,
        message: str = "Conflict",
        code: str = "CONFLICT",
    ):
        super().__init__(400, message, code)


class UnauthorizedException(APIException):
    """401 Unauthorized - Missing or invalid authentication."""

    def __init__(
        self,
        message: str = "Unauthorized",
        code: str = "UNAUTHORIZED",
    ):
        super().__init__(401, message, code)


class NotFoundException(APIException):
    """404 Not Found - Resource doesn't exist."""

    def __init__(
        self,
        message: str = "Not found",
        code: str = "NOT_FOUND",
    ):
        super().__init__(404, message, code)


class InternalServerException(APIException):
    """500 Internal Server Error - Unexpected server error."""

    def __init__(
        self,
        message: str = "Internal server error",
        code: str = "INTERNAL_ERROR",
    ):
        super().__init__(500, message, code)


_EXCEPTIONS = {
    ErrorKind.VALIDATION: ValidationException,
    ErrorKind.CONFLICT: ConflictException,
    ErrorKind.UNAUTHORIZED: UnauthorizedException,
    ErrorKind.NOT_FOUND: NotFoundException,
    ErrorKind.INTERNAL: InternalServerException,
}


def to_exception(error: ServiceError) -> APIException:
    """Map a ServiceError onto the API exception for its kind."""
    return _EXCEPTIONS[error.kind](message=error.message, code=error.code)


def raise_error(error: ServiceError) -> NoReturn:
    raise to_exception(error)


def unwrap(result: Result[T]) -> T:
    """
    Return the value of an Ok result or raise the matching APIException.

    Args:
        result: Outcome returned by a service operation

    Returns:
        The wrapped value

    Raises:
        APIException: When the result is an Err
    """
    if isinstance(result, Err):
        raise_error(result.error)
    return result.value
