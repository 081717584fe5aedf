"""
Credential store for user accounts.

Persists user records in the ``users`` collection. Every mutation is a
single-document atomic update.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

PUBLIC_PROJECTION = {"password": 0, "refreshToken": 0}


class DuplicateUserError(ValueError):
    """Raised when a write collides with an existing username or email."""


def _to_object_id(user_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


def normalize(value: str) -> str:
    """Usernames and emails are compared trimmed and lowercase."""
    return value.strip().lower()


class UserStore:
    """
    Handles user record reads and writes.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize UserStore.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._users_collection = db["users"]

    async def find_by_email(self, email: str) -> Optional[dict]:
        """
        Load a full user record (including secrets) by email.

        Only the email field is matched; a username that happens to look
        like an email never resolves here.

        Returns:
            User document or None if not found
        """
        return await self._users_collection.find_one({"email": normalize(email)})

    async def find_by_username(self, username: str) -> Optional[dict]:
        """Load a full user record (including secrets) by username."""
        return await self._users_collection.find_one({"username": normalize(username)})

    async def find_conflicting(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> Optional[dict]:
        """
        Find another user already holding the given username or email.

        Args:
            username: Username to check
            email: Email to check
            exclude_id: User ID to ignore (the user being updated)

        Returns:
            The conflicting user document or None
        """
        clauses = []
        if username:
            clauses.append({"username": normalize(username)})
        if email:
            clauses.append({"email": normalize(email)})
        if not clauses:
            return None

        query: Dict[str, Any] = {"$or": clauses}
        if exclude_id:
            oid = _to_object_id(exclude_id)
            if oid is not None:
                query["_id"] = {"$ne": oid}

        return await self._users_collection.find_one(query, PUBLIC_PROJECTION)

    async def find_by_id(
        self,
        user_id: str,
        include_secrets: bool = False,
    ) -> Optional[dict]:
        """
        Load user by MongoDB ID.

        Args:
            user_id: MongoDB ObjectId as string
            include_secrets: Also load password hash and refresh token

        Returns:
            User document or None if not found or the ID is malformed
        """
        oid = _to_object_id(user_id)
        if oid is None:
            return None

        projection = None if include_secrets else PUBLIC_PROJECTION
        return await self._users_collection.find_one({"_id": oid}, projection)

    async def create(
        self,
        full_name: str,
        username: str,
        email: str,
        password_hash: str,
        avatar: str,
        cover_image: str = "",
    ) -> str:
        """
        Create a new user record.

        Returns:
            The inserted user ID

        Raises:
            DuplicateUserError: username or email already taken
        """
        now = datetime.now(timezone.utc)
        user_doc = {
            "username": normalize(username),
            "email": normalize(email),
            "fullName": full_name.strip(),
            "avatar": avatar,
            "coverImage": cover_image or "",
            "watchHistory": [],
            "password": password_hash,
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            result = await self._users_collection.insert_one(user_doc)
        except DuplicateKeyError as e:
            raise DuplicateUserError("User already exists") from e

        logger.info(f"User created: {result.inserted_id}")
        return str(result.inserted_id)

    async def update_fields(self, user_id: str, fields: Dict[str, Any]) -> Optional[dict]:
        """
        Replace fields on a user record.

        Args:
            user_id: MongoDB user ID
            fields: Field values to set

        Returns:
            The updated user (public projection) or None if not found

        Raises:
            DuplicateUserError: the update collides with another user's email
        """
        oid = _to_object_id(user_id)
        if oid is None:
            return None

        try:
            return await self._users_collection.find_one_and_update(
                {"_id": oid},
                {"$set": {**fields, "updatedAt": datetime.now(timezone.utc)}},
                projection=PUBLIC_PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise DuplicateUserError("User already exists") from e

    async def set_refresh_token(self, user_id: str, token: str) -> None:
        """Overwrite the stored refresh token."""
        await self._users_collection.update_one(
            {"_id": ObjectId(user_id)},
            {"$set": {"refreshToken": token}}
        )

    async def clear_refresh_token(self, user_id: str) -> None:
        """Remove the stored refresh token."""
        oid = _to_object_id(user_id)
        if oid is None:
            return

        await self._users_collection.update_one(
            {"_id": oid},
            {"$unset": {"refreshToken": ""}}
        )

    async def rotate_refresh_token(self, user_id: str, expected: str, new_token: str) -> bool:
        """
        Replace the stored refresh token only if it still equals ``expected``.

        Args:
            user_id: MongoDB user ID
            expected: Token the caller presented
            new_token: Token to store

        Returns:
            True if the swap happened, False if another write got there first
        """
        result = await self._users_collection.update_one(
            {"_id": ObjectId(user_id), "refreshToken": expected},
            {"$set": {"refreshToken": new_token}}
        )
        return result.matched_count == 1
