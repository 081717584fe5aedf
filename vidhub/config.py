"""
VidHub application settings.

Extends the base settings with account-service configuration.
"""

from typing import Optional
from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """VidHub-specific settings."""

    # ==========================================================================
    # Token Cookies
    # ==========================================================================
    COOKIE_SECURE: bool = True
    COOKIE_SAMESITE: str = "strict"  # strict, lax, none

    # ==========================================================================
    # Session Policy
    # ==========================================================================
    # Report unknown accounts on login as bad credentials instead of 404
    CONCEAL_UNKNOWN_ACCOUNTS: bool = False

    # Also drop the stored refresh token when the password changes
    REVOKE_SESSION_ON_PASSWORD_CHANGE: bool = False

    # ==========================================================================
    # Media Uploads (Cloudinary-compatible)
    # ==========================================================================
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_UPLOAD_URL: str = "https://api.cloudinary.com/v1_1"
    MEDIA_UPLOAD_TIMEOUT_SECONDS: float = 30.0

    # Local staging directory for incoming multipart files
    UPLOAD_TEMP_DIR: str = "./public/temp"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024


# Global settings instance
settings = Settings()
