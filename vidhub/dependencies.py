"""
FastAPI dependencies for VidHub.

Provides dependency injection for all services.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import JWTTokenIssuer, PasswordHasher
from common.utils.exceptions import unwrap
from vidhub.auth.services.session_manager import SessionManager
from vidhub.config import Settings
from vidhub.media.services.uploader import MediaUploader
from vidhub.middleware.auth import AuthContext, AuthMiddleware
from vidhub.user.services.user_store import UserStore


# ─────────────────────────────────────────────────────────────────
# Global service instances
# ─────────────────────────────────────────────────────────────────

_session_manager: Optional[SessionManager] = None
_auth_middleware: Optional[AuthMiddleware] = None


def init_all_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """
    Initialize all services with database and settings.

    Called once at application startup.

    Args:
        db: MongoDB database connection
        settings: Validated application settings
    """
    global _session_manager, _auth_middleware

    user_store = UserStore(db)
    token_issuer = JWTTokenIssuer(
        access_secret=settings.ACCESS_TOKEN_SECRET,
        refresh_secret=settings.REFRESH_TOKEN_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_token_expire_days=settings.REFRESH_TOKEN_EXPIRE_DAYS,
    )
    media_uploader = MediaUploader(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        upload_url=settings.CLOUDINARY_UPLOAD_URL,
        timeout=settings.MEDIA_UPLOAD_TIMEOUT_SECONDS,
    )

    _session_manager = SessionManager(
        user_store=user_store,
        token_provider=token_issuer,
        password_hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        media_uploader=media_uploader,
        conceal_unknown_accounts=settings.CONCEAL_UNKNOWN_ACCOUNTS,
        revoke_session_on_password_change=settings.REVOKE_SESSION_ON_PASSWORD_CHANGE,
    )
    _auth_middleware = AuthMiddleware(user_store=user_store, token_provider=token_issuer)


def get_session_manager() -> SessionManager:
    """Get session manager instance."""
    if _session_manager is None:
        raise RuntimeError("Services not initialized. Call init_all_services first.")
    return _session_manager


def get_auth_middleware() -> AuthMiddleware:
    """Get auth middleware instance."""
    if _auth_middleware is None:
        raise RuntimeError("Services not initialized. Call init_all_services first.")
    return _auth_middleware


async def require_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> AuthContext:
    """
    Dependency that requires authentication.

    Usage:
        @router.get("/protected")
        async def protected_route(auth: Annotated[AuthContext, Depends(require_auth)]):
            return {"user_id": auth.user_id}
    """
    return unwrap(await auth_middleware.authenticate(request))
