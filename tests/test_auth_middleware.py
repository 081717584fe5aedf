"""Unit tests for the access-token gate."""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock
from pymongo.errors import PyMongoError
from starlette.requests import Request

from common.auth import JWTTokenIssuer
from common.utils.result import ErrorKind
from vidhub.middleware.auth import AuthMiddleware


def _request(headers=None, cookies=None) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        raw_headers.append((b"cookie", cookie_header.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw_headers})


@pytest_asyncio.fixture
async def registered(session_manager, ada_fields):
    user = (await session_manager.register(**ada_fields)).value
    login = (await session_manager.login(username="ada", password="p@ss1")).value
    return user, login.tokens


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_bearer_header(self, auth_middleware, registered):
        user, tokens = registered

        result = await auth_middleware.authenticate(
            _request(headers={"Authorization": f"Bearer {tokens.access_token}"})
        )

        assert result.is_ok
        assert result.value.user_id == user["_id"]
        assert "password" not in result.value.user
        assert "refreshToken" not in result.value.user

    @pytest.mark.asyncio
    async def test_cookie_preferred_over_header(self, auth_middleware, registered):
        user, tokens = registered

        result = await auth_middleware.authenticate(_request(
            headers={"Authorization": "Bearer garbage"},
            cookies={"accessToken": tokens.access_token},
        ))

        assert result.value.user_id == user["_id"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, "Bearer", "Basic abc", "Bearer a b", "Bearer not-a-jwt"])
    async def test_bad_credentials_are_uniform(self, auth_middleware, header):
        headers = {"Authorization": header} if header else None

        result = await auth_middleware.authenticate(_request(headers=headers))

        assert result.error.kind is ErrorKind.UNAUTHORIZED
        assert result.error.message == "Invalid or expired access token"
        assert result.error.code == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_tampered_signature_rejected(self, auth_middleware, registered):
        _, tokens = registered
        head, payload, signature = tokens.access_token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

        result = await auth_middleware.authenticate(
            _request(headers={"Authorization": f"Bearer {head}.{payload}.{flipped}"})
        )

        assert result.error.kind is ErrorKind.UNAUTHORIZED
        assert result.error.message == "Invalid or expired access token"

    @pytest.mark.asyncio
    async def test_refresh_token_rejected(self, auth_middleware, registered):
        _, tokens = registered

        result = await auth_middleware.authenticate(
            _request(headers={"Authorization": f"Bearer {tokens.refresh_token}"})
        )

        assert result.error.kind is ErrorKind.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, user_store, registered):
        user, _ = registered
        issuer = JWTTokenIssuer(
            access_secret="access-test-secret",
            refresh_secret="refresh-test-secret",
            access_token_expire_minutes=-1,
        )
        gate = AuthMiddleware(user_store=user_store, token_provider=issuer)
        expired = issuer.issue_access_token(user)

        result = await gate.authenticate(_request(headers={"Authorization": f"Bearer {expired}"}))

        assert result.error.message == "Invalid or expired access token"

    @pytest.mark.asyncio
    async def test_deleted_user_rejected(self, auth_middleware, user_store, registered):
        _, tokens = registered
        user_store.users.clear()

        result = await auth_middleware.authenticate(
            _request(headers={"Authorization": f"Bearer {tokens.access_token}"})
        )

        assert result.error.kind is ErrorKind.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_store_failure_is_internal(self, auth_middleware, user_store, registered):
        _, tokens = registered
        user_store.find_by_id = AsyncMock(side_effect=PyMongoError("timeout"))

        result = await auth_middleware.authenticate(
            _request(headers={"Authorization": f"Bearer {tokens.access_token}"})
        )

        assert result.error.kind is ErrorKind.INTERNAL
