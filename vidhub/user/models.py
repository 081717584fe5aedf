"""
User model for VidHub.

The Beanie document declares the ``users`` collection schema and its
unique indexes; Beanie creates them at startup. Reads and writes go
through ``UserStore`` on the raw Motor collection.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

# Never returned to callers
SECRET_FIELDS = ("password", "refreshToken")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Document):
    """
    User account document.

    ``username`` and ``email`` are stored lowercase and are unique.
    ``refreshToken`` holds the single currently valid refresh token.
    """

    username: Indexed(str, unique=True)  # type: ignore
    email: Indexed(str, unique=True)  # type: ignore
    fullName: Indexed(str)  # type: ignore
    avatar: str
    coverImage: str = ""
    watchHistory: List[PydanticObjectId] = Field(default_factory=list)
    password: str
    refreshToken: Optional[str] = None
    createdAt: datetime = Field(default_factory=_utcnow)
    updatedAt: datetime = Field(default_factory=_utcnow)

    class Settings:
        name = "users"


def to_public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Format a user document for API responses.

    Drops the password hash and refresh token and stringifies ids and
    timestamps.
    """
    public = {k: v for k, v in user.items() if k not in SECRET_FIELDS}
    public["_id"] = str(user["_id"])
    public["watchHistory"] = [str(v) for v in user.get("watchHistory", [])]

    for key in ("createdAt", "updatedAt"):
        if isinstance(public.get(key), datetime):
            public[key] = public[key].isoformat()

    return public
