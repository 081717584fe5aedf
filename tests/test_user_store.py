"""Unit tests for UserStore against a mocked Motor collection."""

import pytest
from unittest.mock import MagicMock
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from vidhub.user.services.user_store import PUBLIC_PROJECTION, DuplicateUserError, UserStore

USER_ID = "64b7f0c2a1b2c3d4e5f60718"


@pytest.fixture
def store(mock_db):
    return UserStore(mock_db)


class TestCreate:
    @pytest.mark.asyncio
    async def test_inserts_normalized_document(self, store, mock_collection):
        mock_collection.insert_one.return_value = MagicMock(inserted_id=ObjectId(USER_ID))

        user_id = await store.create(
            full_name=" Ada ",
            username=" ADA ",
            email="Ada@X.com",
            password_hash="$2b$hash",
            avatar="https://cdn.test/a.png",
        )

        assert user_id == USER_ID
        doc = mock_collection.insert_one.call_args[0][0]
        assert doc["username"] == "ada"
        assert doc["email"] == "ada@x.com"
        assert doc["fullName"] == "Ada"
        assert doc["coverImage"] == ""
        assert doc["watchHistory"] == []
        assert "refreshToken" not in doc

    @pytest.mark.asyncio
    async def test_duplicate_key_raises_duplicate_user(self, store, mock_collection):
        mock_collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

        with pytest.raises(DuplicateUserError):
            await store.create("Ada", "ada", "ada@x.com", "$2b$hash", "https://cdn.test/a.png")


class TestLookups:
    @pytest.mark.asyncio
    async def test_find_by_email_queries_only_email(self, store, mock_collection):
        mock_collection.find_one.return_value = {"_id": ObjectId(USER_ID)}

        await store.find_by_email(" Ada@X.com ")

        mock_collection.find_one.assert_called_once_with({"email": "ada@x.com"})

    @pytest.mark.asyncio
    async def test_find_by_username_queries_only_username(self, store, mock_collection):
        mock_collection.find_one.return_value = None

        assert await store.find_by_username("ada@x.com") is None

        mock_collection.find_one.assert_called_once_with({"username": "ada@x.com"})

    @pytest.mark.asyncio
    async def test_find_by_id_hides_secrets_by_default(self, store, mock_collection):
        mock_collection.find_one.return_value = None

        await store.find_by_id(USER_ID)
        await store.find_by_id(USER_ID, include_secrets=True)

        public_call, secret_call = mock_collection.find_one.call_args_list
        assert public_call[0] == ({"_id": ObjectId(USER_ID)}, PUBLIC_PROJECTION)
        assert secret_call[0] == ({"_id": ObjectId(USER_ID)}, None)

    @pytest.mark.asyncio
    async def test_find_by_id_malformed_id(self, store, mock_collection):
        assert await store.find_by_id("not-an-object-id") is None
        mock_collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_find_conflicting_excludes_self(self, store, mock_collection):
        mock_collection.find_one.return_value = None

        await store.find_conflicting(email="Ada@X.com", exclude_id=USER_ID)

        query = mock_collection.find_one.call_args[0][0]
        assert query == {"$or": [{"email": "ada@x.com"}], "_id": {"$ne": ObjectId(USER_ID)}}

    @pytest.mark.asyncio
    async def test_find_conflicting_without_criteria(self, store, mock_collection):
        assert await store.find_conflicting() is None
        mock_collection.find_one.assert_not_called()


class TestUpdates:
    @pytest.mark.asyncio
    async def test_update_fields_returns_public_document(self, store, mock_collection):
        mock_collection.find_one_and_update.return_value = {"_id": ObjectId(USER_ID), "fullName": "Ada L"}

        updated = await store.update_fields(USER_ID, {"fullName": "Ada L"})

        assert updated["fullName"] == "Ada L"
        args, kwargs = mock_collection.find_one_and_update.call_args
        assert args[0] == {"_id": ObjectId(USER_ID)}
        assert args[1]["$set"]["fullName"] == "Ada L"
        assert "updatedAt" in args[1]["$set"]
        assert kwargs["projection"] == PUBLIC_PROJECTION
        assert kwargs["return_document"] == ReturnDocument.AFTER

    @pytest.mark.asyncio
    async def test_update_fields_duplicate_email(self, store, mock_collection):
        mock_collection.find_one_and_update.side_effect = DuplicateKeyError("E11000 duplicate key")

        with pytest.raises(DuplicateUserError):
            await store.update_fields(USER_ID, {"email": "taken@x.com"})

    @pytest.mark.asyncio
    async def test_clear_refresh_token_unsets_field(self, store, mock_collection):
        await store.clear_refresh_token(USER_ID)

        mock_collection.update_one.assert_called_once_with(
            {"_id": ObjectId(USER_ID)},
            {"$unset": {"refreshToken": ""}},
        )

    @pytest.mark.asyncio
    async def test_rotate_is_conditional_on_expected_token(self, store, mock_collection):
        mock_collection.update_one.return_value = MagicMock(matched_count=1)

        assert await store.rotate_refresh_token(USER_ID, expected="old", new_token="new")

        mock_collection.update_one.assert_called_once_with(
            {"_id": ObjectId(USER_ID), "refreshToken": "old"},
            {"$set": {"refreshToken": "new"}},
        )

    @pytest.mark.asyncio
    async def test_rotate_reports_lost_race(self, store, mock_collection):
        mock_collection.update_one.return_value = MagicMock(matched_count=0)

        assert not await store.rotate_refresh_token(USER_ID, expected="old", new_token="new")
