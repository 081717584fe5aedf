"""
Explicit result values for service operations.

Services return ``Ok(value)`` or ``Err(error)`` instead of raising for
expected failures. The HTTP boundary turns an ``Err`` into the matching
API exception (see ``common.utils.exceptions.unwrap``).

Example:
    from common.utils.result import Ok, Err, ErrorKind, fail

    async def find(user_id: str) -> Result[dict]:
        user = await store.find_by_id(user_id)
        if user is None:
            return fail(ErrorKind.NOT_FOUND, "User not found")
        return Ok(user)

    result = await find("abc")
    if result.is_ok:
        print(result.value)
    else:
        print(result.error.message)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure taxonomy shared by every service."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def default_code(self) -> str:
        return _DEFAULT_CODES[self]


# Conflicts are reported as 400, same as other bad input.
_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}

_DEFAULT_CODES = {
    ErrorKind.VALIDATION: "VALIDATION_ERROR",
    ErrorKind.CONFLICT: "CONFLICT",
    ErrorKind.UNAUTHORIZED: "UNAUTHORIZED",
    ErrorKind.NOT_FOUND: "NOT_FOUND",
    ErrorKind.INTERNAL: "INTERNAL_ERROR",
}


@dataclass(frozen=True)
class ServiceError:
    """A typed failure with an HTTP-equivalent status and a safe message."""

    kind: ErrorKind
    message: str
    code: str

    @property
    def status_code(self) -> int:
        return self.kind.status_code


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a ServiceError."""

    error: ServiceError

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def fail(kind: ErrorKind, message: str, code: Optional[str] = None) -> Err:
    """Build an Err with the kind's default machine code unless one is given."""
    return Err(ServiceError(kind=kind, message=message, code=code or kind.default_code))
