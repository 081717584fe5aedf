"""
Environment-driven settings shared by every service.

Values come from environment variables or a ``.env`` file through
pydantic-settings. Applications subclass ``BaseAppSettings`` and add
their own fields.

Example:
    from common.config import BaseAppSettings

    class Settings(BaseAppSettings):
        CLOUDINARY_CLOUD_NAME: str = ""

    settings = Settings()
    settings.validate_required()
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """Storage, token, password hashing and server settings."""

    # ==========================================================================
    # Storage
    # ==========================================================================
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "vidhub"

    # ==========================================================================
    # Tokens
    # ==========================================================================
    # Separate signing secrets keep access and refresh tokens from being
    # accepted in each other's place.
    ACCESS_TOKEN_SECRET: Optional[str] = None
    REFRESH_TOKEN_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 10

    # ==========================================================================
    # Passwords
    # ==========================================================================
    BCRYPT_ROUNDS: int = 10

    # ==========================================================================
    # Server
    # ==========================================================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "*"  # Comma-separated origins or "*"
    CORS_ALLOW_CREDENTIALS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=True,
    )

    @property
    def access_token_max_age(self) -> int:
        """Access token lifetime in seconds."""
        return self.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    @property
    def refresh_token_max_age(self) -> int:
        """Refresh token lifetime in seconds."""
        return self.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    def get_cors_origins(self) -> List[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    def validate_required(self) -> None:
        """
        Check that the service can issue tokens safely.

        Raises:
            ValueError: Listing every misconfigured setting
        """
        problems = []

        for name in ("ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET"):
            if not getattr(self, name):
                problems.append(f"{name} is required")

        if self.ACCESS_TOKEN_SECRET and self.ACCESS_TOKEN_SECRET == self.REFRESH_TOKEN_SECRET:
            problems.append("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")

        for name in ("ACCESS_TOKEN_EXPIRE_MINUTES", "REFRESH_TOKEN_EXPIRE_DAYS"):
            if getattr(self, name) <= 0:
                problems.append(f"{name} must be positive")

        if problems:
            raise ValueError("Configuration errors:\n- " + "\n- ".join(problems))
