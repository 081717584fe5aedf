"""
Standard API response helpers.

Provides consistent response formatting for success and error cases.

Example:
    from common.utils import success_response, error_response

    @app.post("/users/register", status_code=201)
    async def register(...):
        return success_response(user, message="User created", status=201)

    JSONResponse(
        status_code=404,
        content=error_response("User not found", status=404, code="NOT_FOUND"),
    )
"""

from typing import Any, Optional, Dict


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status: int = 200,
) -> Dict[str, Any]:
    """
    Create a standard success response.

    Args:
        data: The response data (can be dict, list, or any serializable type)
        message: Optional success message
        status: HTTP status code echoed in the body

    Returns:
        Dictionary with status, data, message and success=True
    """
    return {
        "status": status,
        "data": data if data is not None else {},
        "message": message or "Success",
        "success": True,
    }


def error_response(
    message: str,
    status: int,
    code: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a standard error response.

    Args:
        message: Human-readable error message
        status: HTTP status code echoed in the body
        code: Machine-readable error code (e.g., "UNAUTHORIZED")

    Returns:
        Dictionary with status, message and success=False
    """
    response: Dict[str, Any] = {
        "status": status,
        "message": message,
        "success": False,
    }

    if code:
        response["code"] = code

    return response
