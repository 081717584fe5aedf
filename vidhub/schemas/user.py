"""
Pydantic models for user account request validation.

Fields are optional so that missing values reach the session layer and
come back as validation errors in the standard envelope.
"""

from typing import Optional
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request body for login. Email takes precedence over username."""
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class RefreshTokenRequest(BaseModel):
    """Request body for token refresh when the cookie is not available."""
    refreshToken: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Request body for changing the current password."""
    oldPassword: Optional[str] = None
    newPassword: Optional[str] = Field(None, max_length=256)


class UpdateAccountRequest(BaseModel):
    """Request body for updating account details."""
    fullName: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=254)
