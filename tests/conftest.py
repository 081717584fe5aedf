"""Shared test fixtures for VidHub backend tests."""

import pytest
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.auth import JWTTokenIssuer, PasswordHasher
from vidhub.auth.services.session_manager import SessionManager
from vidhub.middleware.auth import AuthMiddleware
from vidhub.user.services.user_store import normalize

ACCESS_SECRET = "access-test-secret"
REFRESH_SECRET = "refresh-test-secret"


class FakeUserStore:
    """In-memory stand-in for UserStore with the same async interface."""

    def __init__(self):
        self.users: Dict[ObjectId, dict] = {}

    @staticmethod
    def _public(doc: dict) -> dict:
        return {k: v for k, v in doc.items() if k not in ("password", "refreshToken")}

    def _find_by(self, field: str, value: str) -> Optional[dict]:
        value = normalize(value)
        for doc in self.users.values():
            if doc[field] == value:
                return dict(doc)
        return None

    async def find_by_email(self, email: str) -> Optional[dict]:
        return self._find_by("email", email)

    async def find_by_username(self, username: str) -> Optional[dict]:
        return self._find_by("username", username)

    async def find_conflicting(self, username=None, email=None, exclude_id=None) -> Optional[dict]:
        for oid, doc in self.users.items():
            if exclude_id and str(oid) == exclude_id:
                continue
            if username and doc["username"] == normalize(username):
                return self._public(doc)
            if email and doc["email"] == normalize(email):
                return self._public(doc)
        return None

    async def find_by_id(self, user_id: str, include_secrets: bool = False) -> Optional[dict]:
        if not ObjectId.is_valid(user_id):
            return None
        doc = self.users.get(ObjectId(user_id))
        if doc is None:
            return None
        return dict(doc) if include_secrets else self._public(doc)

    async def create(self, full_name, username, email, password_hash, avatar, cover_image="") -> str:
        oid = ObjectId()
        now = datetime.now(timezone.utc)
        self.users[oid] = {
            "_id": oid,
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
        return str(oid)

    async def update_fields(self, user_id: str, fields: dict) -> Optional[dict]:
        doc = self.users.get(ObjectId(user_id))
        if doc is None:
            return None
        doc.update(fields)
        doc["updatedAt"] = datetime.now(timezone.utc)
        return self._public(doc)

    async def set_refresh_token(self, user_id: str, token: str) -> None:
        self.users[ObjectId(user_id)]["refreshToken"] = token

    async def clear_refresh_token(self, user_id: str) -> None:
        self.users[ObjectId(user_id)].pop("refreshToken", None)

    async def rotate_refresh_token(self, user_id: str, expected: str, new_token: str) -> bool:
        doc = self.users[ObjectId(user_id)]
        if doc.get("refreshToken") != expected:
            return False
        doc["refreshToken"] = new_token
        return True

    def stored_refresh_token(self, user_id: str) -> Optional[str]:
        return self.users[ObjectId(user_id)].get("refreshToken")


class FakeMediaUploader:
    """Returns a CDN URL for any path except ones containing 'fail'."""

    def __init__(self):
        self.uploaded: List[str] = []

    async def upload(self, local_path: Optional[str]) -> Optional[dict]:
        if not local_path or "fail" in local_path:
            return None
        self.uploaded.append(local_path)
        return {"url": f"https://cdn.test/{Path(local_path).name}", "public_id": Path(local_path).stem}


@pytest.fixture
def user_store():
    return FakeUserStore()


@pytest.fixture
def media_uploader():
    return FakeMediaUploader()


@pytest.fixture
def token_issuer():
    return JWTTokenIssuer(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture
def password_hasher():
    # bcrypt minimum cost
    return PasswordHasher(rounds=4)


@pytest.fixture
def session_manager(user_store, token_issuer, password_hasher, media_uploader):
    return SessionManager(
        user_store=user_store,
        token_provider=token_issuer,
        password_hasher=password_hasher,
        media_uploader=media_uploader,
    )


@pytest.fixture
def auth_middleware(user_store, token_issuer):
    return AuthMiddleware(user_store=user_store, token_provider=token_issuer)


@pytest.fixture
def ada_fields():
    return {
        "full_name": "Ada",
        "username": "ada",
        "email": "ada@x.com",
        "password": "p@ss1",
        "avatar_path": "ok.png",
    }


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db
