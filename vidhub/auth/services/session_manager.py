"""
Session lifecycle for user accounts.

Each user holds exactly one live refresh token on their record. Login and
refresh overwrite it, logout removes it, and a refresh request must present
the exact stored value; anything else is treated as a reused token.

All operations return ``Result`` values instead of raising for expected
failures.
"""

import asyncio
import functools
import hmac
import logging
import re
import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from common.auth.base import InvalidTokenError, TokenClass, TokenProvider, TokenSigningError
from common.auth.password import PasswordHasher
from common.utils.result import ErrorKind, Ok, Result, fail
from vidhub.media.services.uploader import MediaUploader
from vidhub.user.models import to_public_user
from vidhub.user.services.user_store import DuplicateUserError, UserStore, normalize

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
REFRESH_TOKEN_REUSED = "Refresh token is expired or used"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    user: Dict[str, Any]
    tokens: TokenPair


def _store_guard(method):
    """Turn storage failures into an Internal result."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except PyMongoError as e:
            logger.error(f"{method.__name__} failed on storage: {e}")
            return fail(ErrorKind.INTERNAL, "Internal server error")

    return wrapper


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


class SessionManager:
    """
    Orchestrates registration, login, logout, token rotation and
    account updates.
    """

    def __init__(
        self,
        user_store: UserStore,
        token_provider: TokenProvider,
        password_hasher: PasswordHasher,
        media_uploader: MediaUploader,
        conceal_unknown_accounts: bool = False,
        revoke_session_on_password_change: bool = False,
    ):
        """
        Initialize SessionManager.

        Args:
            user_store: Credential store
            token_provider: Issues and verifies access/refresh tokens
            password_hasher: One-way password hashing
            media_uploader: Uploads avatar and cover images
            conceal_unknown_accounts: Report unknown login identifiers as
                bad credentials instead of not found
            revoke_session_on_password_change: Clear the stored refresh
                token after a password change
        """
        self._store = user_store
        self._tokens = token_provider
        self._hasher = password_hasher
        self._uploader = media_uploader
        self._conceal_unknown_accounts = conceal_unknown_accounts
        self._revoke_session_on_password_change = revoke_session_on_password_change
        self._dummy_password_hash: Optional[str] = None

    # ─────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────

    @_store_guard
    async def register(
        self,
        full_name: Optional[str],
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
        avatar_path: Optional[str],
        cover_path: Optional[str] = None,
    ) -> Result[Dict[str, Any]]:
        """
        Create a user account.

        Args:
            full_name: Display name
            username: Unique handle (stored lowercase)
            email: Unique email (stored lowercase)
            password: Plaintext password, hashed before storage
            avatar_path: Staged avatar file (required)
            cover_path: Staged cover image file (optional)

        Returns:
            Ok(public user) or Err(ValidationError | Conflict | Internal)
        """
        if any(_blank(v) for v in (full_name, username, email, password)):
            return fail(ErrorKind.VALIDATION, "All fields are required")

        if not _EMAIL_PATTERN.match(email.strip()):
            return fail(ErrorKind.VALIDATION, "Invalid email address", code="INVALID_EMAIL")

        existing = await self._store.find_conflicting(username=username, email=email)
        if existing:
            return fail(ErrorKind.CONFLICT, "User already exists", code="USER_ALREADY_EXISTS")

        if not avatar_path:
            return fail(ErrorKind.VALIDATION, "Avatar is required", code="AVATAR_REQUIRED")

        avatar = await self._uploader.upload(avatar_path)
        if not avatar:
            return fail(ErrorKind.VALIDATION, "Avatar is required", code="AVATAR_REQUIRED")

        cover = await self._uploader.upload(cover_path) if cover_path else None

        try:
            password_hash = await asyncio.to_thread(self._hasher.hash, password)
        except ValueError as e:
            logger.error(f"Password hashing failed: {e}")
            return fail(ErrorKind.INTERNAL, "User not created")

        try:
            user_id = await self._store.create(
                full_name=full_name,
                username=username,
                email=email,
                password_hash=password_hash,
                avatar=avatar["url"],
                cover_image=cover["url"] if cover else "",
            )
        except DuplicateUserError:
            return fail(ErrorKind.CONFLICT, "User already exists", code="USER_ALREADY_EXISTS")

        created = await self._store.find_by_id(user_id)
        if not created:
            return fail(ErrorKind.INTERNAL, "User not created")

        logger.info(f"User registered: {user_id}")
        return Ok(to_public_user(created))

    # ─────────────────────────────────────────────────────────────
    # Login / logout / refresh
    # ─────────────────────────────────────────────────────────────

    @_store_guard
    async def login(
        self,
        email: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Result[LoginResult]:
        """
        Verify credentials and start a new session.

        Email and username are looked up only against their own field;
        when both are sent, email is used. Any previously stored refresh
        token is overwritten, so only the newest login can refresh.

        Args:
            email: Account email
            username: Account username
            password: Plaintext password

        Returns:
            Ok(LoginResult) or Err(ValidationError | NotFound | Unauthorized | Internal)
        """
        if (_blank(email) and _blank(username)) or not password:
            return fail(ErrorKind.VALIDATION, "Username or email and password are required")

        if not _blank(email):
            user = await self._store.find_by_email(email)
        else:
            user = await self._store.find_by_username(username)

        if not user:
            logger.warning("Login failed - user not found")
            if self._conceal_unknown_accounts:
                # Unknown accounts pay the same bcrypt cost as a wrong password
                await asyncio.to_thread(self._hasher.verify, password, await self._dummy_hash())
                return fail(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")
            return fail(ErrorKind.NOT_FOUND, "User not found", code="USER_NOT_FOUND")

        verified = await asyncio.to_thread(self._hasher.verify, password, user.get("password", ""))
        if not verified:
            logger.warning(f"Login failed - invalid password for user: {user['_id']}")
            return fail(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

        minted = self._mint_pair(user)
        if not minted.is_ok:
            return minted
        tokens = minted.value

        user_id = str(user["_id"])
        await self._store.set_refresh_token(user_id, tokens.refresh_token)

        logged_in = await self._store.find_by_id(user_id)
        if not logged_in:
            return fail(ErrorKind.INTERNAL, "Internal server error")

        logger.info(f"User logged in: {user_id}")
        return Ok(LoginResult(user=to_public_user(logged_in), tokens=tokens))

    @_store_guard
    async def logout(self, user_id: str) -> Result[None]:
        """
        End the user's session by removing the stored refresh token.

        Args:
            user_id: Authenticated user ID
        """
        await self._store.clear_refresh_token(user_id)
        logger.info(f"User logged out: {user_id}")
        return Ok(None)

    @_store_guard
    async def refresh(self, presented_token: Optional[str]) -> Result[TokenPair]:
        """
        Rotate the token pair.

        The presented refresh token must verify and must equal the value
        stored on the user. A token that verifies but no longer matches was
        already rotated out (or revoked) and is rejected.

        Args:
            presented_token: Refresh token from cookie or request body

        Returns:
            Ok(TokenPair) or Err(Unauthorized | Internal)
        """
        if not presented_token:
            return fail(ErrorKind.UNAUTHORIZED, "Unauthorized request", code="REFRESH_TOKEN_REQUIRED")

        try:
            claims = self._tokens.verify(presented_token, TokenClass.REFRESH)
        except InvalidTokenError as e:
            logger.warning(f"Refresh rejected: {e}")
            return fail(ErrorKind.UNAUTHORIZED, INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN")

        user = await self._store.find_by_id(claims["sub"], include_secrets=True)
        if not user:
            logger.warning("Refresh rejected: user no longer exists")
            return fail(ErrorKind.UNAUTHORIZED, INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN")

        user_id = str(user["_id"])
        stored = user.get("refreshToken")
        if not stored or not hmac.compare_digest(stored, presented_token):
            logger.warning(f"Refresh token reuse detected for user: {user_id}")
            return fail(ErrorKind.UNAUTHORIZED, REFRESH_TOKEN_REUSED, code="REFRESH_TOKEN_REUSED")

        minted = self._mint_pair(user)
        if not minted.is_ok:
            return minted
        tokens = minted.value

        rotated = await self._store.rotate_refresh_token(
            user_id,
            expected=presented_token,
            new_token=tokens.refresh_token,
        )
        if not rotated:
            logger.warning(f"Concurrent refresh lost the race for user: {user_id}")
            return fail(ErrorKind.UNAUTHORIZED, REFRESH_TOKEN_REUSED, code="REFRESH_TOKEN_REUSED")

        logger.info(f"Tokens rotated for user: {user_id}")
        return Ok(tokens)

    async def _dummy_hash(self) -> str:
        """Hash of a random password, computed once, for unknown-account logins."""
        if self._dummy_password_hash is None:
            self._dummy_password_hash = await asyncio.to_thread(
                self._hasher.hash, secrets.token_urlsafe(16)
            )
        return self._dummy_password_hash

    def _mint_pair(self, user: Dict[str, Any]) -> Result[TokenPair]:
        try:
            return Ok(TokenPair(
                access_token=self._tokens.issue_access_token(user),
                refresh_token=self._tokens.issue_refresh_token(str(user["_id"])),
            ))
        except TokenSigningError as e:
            logger.error(f"Token generation failed for user {user['_id']}: {e}")
            return fail(ErrorKind.INTERNAL, "Token generation failed")

    # ─────────────────────────────────────────────────────────────
    # Account updates
    # ─────────────────────────────────────────────────────────────

    @_store_guard
    async def change_password(
        self,
        user_id: str,
        current_password: Optional[str],
        new_password: Optional[str],
    ) -> Result[None]:
        """
        Replace the user's password after verifying the current one.

        Existing tokens stay valid unless revoke_session_on_password_change
        is enabled.
        """
        if not current_password or _blank(new_password):
            return fail(ErrorKind.VALIDATION, "Old and new password are required")

        user = await self._store.find_by_id(user_id, include_secrets=True)
        if not user:
            return fail(ErrorKind.NOT_FOUND, "User not found", code="USER_NOT_FOUND")

        verified = await asyncio.to_thread(self._hasher.verify, current_password, user.get("password", ""))
        if not verified:
            logger.warning(f"Password change rejected for user: {user_id}")
            return fail(ErrorKind.UNAUTHORIZED, "Invalid old password", code="INVALID_PASSWORD")

        try:
            password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
        except ValueError as e:
            logger.error(f"Password hashing failed: {e}")
            return fail(ErrorKind.INTERNAL, "Internal server error")

        await self._store.update_fields(user_id, {"password": password_hash})

        if self._revoke_session_on_password_change:
            await self._store.clear_refresh_token(user_id)

        logger.info(f"Password changed for user: {user_id}")
        return Ok(None)

    @_store_guard
    async def current_user(self, user_id: str) -> Result[Dict[str, Any]]:
        """Load the public view of a user."""
        user = await self._store.find_by_id(user_id)
        if not user:
            return fail(ErrorKind.NOT_FOUND, "User not found", code="USER_NOT_FOUND")
        return Ok(to_public_user(user))

    @_store_guard
    async def update_profile(
        self,
        user_id: str,
        full_name: Optional[str],
        email: Optional[str],
    ) -> Result[Dict[str, Any]]:
        """
        Replace full name and email.

        Returns:
            Ok(public user) or Err(ValidationError | Conflict | NotFound)
        """
        if _blank(full_name) or _blank(email):
            return fail(ErrorKind.VALIDATION, "All fields are required")

        if not _EMAIL_PATTERN.match(email.strip()):
            return fail(ErrorKind.VALIDATION, "Invalid email address", code="INVALID_EMAIL")

        if await self._store.find_conflicting(email=email, exclude_id=user_id):
            return fail(ErrorKind.CONFLICT, "Email already in use", code="EMAIL_EXISTS")

        try:
            updated = await self._store.update_fields(
                user_id,
                {"fullName": full_name.strip(), "email": normalize(email)},
            )
        except DuplicateUserError:
            return fail(ErrorKind.CONFLICT, "Email already in use", code="EMAIL_EXISTS")

        return self._updated(updated)

    async def update_avatar(self, user_id: str, avatar_path: Optional[str]) -> Result[Dict[str, Any]]:
        """Upload a new avatar and store its URL."""
        return await self._replace_image(user_id, "avatar", avatar_path, "Avatar")

    async def update_cover_image(self, user_id: str, cover_path: Optional[str]) -> Result[Dict[str, Any]]:
        """Upload a new cover image and store its URL."""
        return await self._replace_image(user_id, "coverImage", cover_path, "Cover image")

    @_store_guard
    async def _replace_image(
        self,
        user_id: str,
        field: str,
        local_path: Optional[str],
        label: str,
    ) -> Result[Dict[str, Any]]:
        if not local_path:
            return fail(ErrorKind.VALIDATION, f"{label} file is missing")

        uploaded = await self._uploader.upload(local_path)
        if not uploaded:
            return fail(ErrorKind.VALIDATION, f"Error while uploading {label.lower()}", code="UPLOAD_FAILED")

        updated = await self._store.update_fields(user_id, {field: uploaded["url"]})
        return self._updated(updated)

    @staticmethod
    def _updated(user: Optional[Dict[str, Any]]) -> Result[Dict[str, Any]]:
        if not user:
            return fail(ErrorKind.NOT_FOUND, "User not found", code="USER_NOT_FOUND")
        return Ok(to_public_user(user))
