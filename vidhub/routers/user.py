"""
FastAPI router for user account endpoints.

Provides registration, login, logout, token refresh and account updates.
Tokens are delivered both as http-only cookies and in the response body.
"""

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Annotated, BinaryIO, List, Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, Response, UploadFile, status

from common.utils import ValidationException, success_response, unwrap
from vidhub.auth.services.session_manager import SessionManager, TokenPair
from vidhub.config import settings
from vidhub.dependencies import get_session_manager, require_auth
from vidhub.middleware.auth import ACCESS_TOKEN_COOKIE, AuthContext
from vidhub.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    UpdateAccountRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

REFRESH_TOKEN_COOKIE = "refreshToken"
COPY_CHUNK_SIZE = 64 * 1024


# =============================================================================
# Helper Functions
# =============================================================================
def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.COOKIE_SECURE,
        "samesite": settings.COOKIE_SAMESITE,
    }


def _set_token_cookies(response: Response, tokens: TokenPair) -> None:
    options = _cookie_options()
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=settings.access_token_max_age,
        **options,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=settings.refresh_token_max_age,
        **options,
    )


def _copy_capped(source: BinaryIO, destination: Path, limit: int) -> None:
    """Stream ``source`` into ``destination``, refusing more than ``limit`` bytes."""
    written = 0
    with destination.open("wb") as out:
        while True:
            chunk = source.read(COPY_CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > limit:
                raise ValidationException(
                    f"File exceeds the {limit} byte upload limit",
                    code="FILE_TOO_LARGE",
                )
            out.write(chunk)


async def _stage_upload(upload: Optional[UploadFile], staged: List[Path]) -> Optional[str]:
    """Write an incoming file to the temp directory and return its path."""
    if upload is None or not upload.filename:
        return None

    temp_dir = Path(settings.UPLOAD_TEMP_DIR)
    temp_dir.mkdir(parents=True, exist_ok=True)

    path = temp_dir / f"{uuid.uuid4().hex}{Path(upload.filename).suffix}"
    staged.append(path)
    await asyncio.to_thread(_copy_capped, upload.file, path, settings.MAX_UPLOAD_BYTES)
    return str(path)


def _discard(staged: List[Path]) -> None:
    for path in staged:
        path.unlink(missing_ok=True)


# =============================================================================
# Authentication
# =============================================================================
@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    fullName: Annotated[Optional[str], Form()] = None,
    username: Annotated[Optional[str], Form()] = None,
    email: Annotated[Optional[str], Form()] = None,
    password: Annotated[Optional[str], Form()] = None,
    avatar: Annotated[Optional[UploadFile], File()] = None,
    coverImage: Annotated[Optional[UploadFile], File()] = None,
):
    """
    Register a new user account.

    Multipart form with the account fields, an avatar image and an
    optional cover image.
    """
    staged: List[Path] = []
    try:
        avatar_path = await _stage_upload(avatar, staged)
        cover_path = await _stage_upload(coverImage, staged)

        user = unwrap(await session_manager.register(
            full_name=fullName,
            username=username,
            email=email,
            password=password,
            avatar_path=avatar_path,
            cover_path=cover_path,
        ))
    finally:
        _discard(staged)

    return success_response(user, message="User created", status=status.HTTP_201_CREATED)


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """
    Authenticate with email or username and password.

    Sets accessToken and refreshToken cookies and echoes both tokens.
    """
    result = unwrap(await session_manager.login(
        email=body.email,
        username=body.username,
        password=body.password,
    ))

    _set_token_cookies(response, result.tokens)

    return success_response(
        {
            "user": result.user,
            "accessToken": result.tokens.access_token,
            "refreshToken": result.tokens.refresh_token,
        },
        message="User logged in",
    )


@router.post("/logout")
async def logout(
    response: Response,
    auth: Annotated[AuthContext, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """
    Logout from the current session.

    Clears the stored refresh token and both token cookies.
    """
    unwrap(await session_manager.logout(auth.user_id))

    options = _cookie_options()
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **options)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, **options)

    return success_response({}, message="User logged out")


@router.post("/refresh-token")
async def refresh_token(
    response: Response,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    body: Optional[RefreshTokenRequest] = None,
    refresh_cookie: Annotated[Optional[str], Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
):
    """
    Exchange a refresh token for a new token pair.

    The token is read from the refreshToken cookie, or from the body.
    """
    presented = refresh_cookie or (body.refreshToken if body else None)

    tokens = unwrap(await session_manager.refresh(presented))

    _set_token_cookies(response, tokens)

    return success_response(
        {
            "accessToken": tokens.access_token,
            "refreshToken": tokens.refresh_token,
        },
        message="Access token refreshed",
    )


# =============================================================================
# Account
# =============================================================================
@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    auth: Annotated[AuthContext, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """Change the current user's password."""
    unwrap(await session_manager.change_password(
        auth.user_id,
        body.oldPassword,
        body.newPassword,
    ))
    return success_response({}, message="Password changed successfully")


@router.get("/current-user")
async def current_user(
    auth: Annotated[AuthContext, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """Get the current user's account."""
    user = unwrap(await session_manager.current_user(auth.user_id))
    return success_response(user, message="Current user fetched")


@router.patch("/update-account")
async def update_account(
    body: UpdateAccountRequest,
    auth: Annotated[AuthContext, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """Update full name and email."""
    user = unwrap(await session_manager.update_profile(
        auth.user_id,
        body.fullName,
        body.email,
    ))
    return success_response(user, message="Account details updated")


@router.patch("/avatar")
async def update_avatar(
    auth: Annotated[AuthContext, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    avatar: Annotated[Optional[UploadFile], File()] = None,
):
    """Replace the current user's avatar."""
    staged: List[Path] = []
    try:
        avatar_path = await _stage_upload(avatar, staged)
        user = unwrap(await session_manager.update_avatar(auth.user_id, avatar_path))
    finally:
        _discard(staged)

    return success_response(user, message="Avatar updated")


@router.patch("/cover-image")
async def update_cover_image(
    auth: Annotated[AuthContext, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    coverImage: Annotated[Optional[UploadFile], File()] = None,
):
    """Replace the current user's cover image."""
    staged: List[Path] = []
    try:
        cover_path = await _stage_upload(coverImage, staged)
        user = unwrap(await session_manager.update_cover_image(auth.user_id, cover_path))
    finally:
        _discard(staged)

    return success_response(user, message="Cover image updated")
