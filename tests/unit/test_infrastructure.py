"""Unit tests for the infrastructure layer and the account repository."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from config import EmailSettings, VerificationSettings
from errors import ServiceUnavailableError
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from repositories.user_repository import UserRepository


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    async def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = await client.post("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_post_propagates_exception(self, mocker):
        client = HttpClient()
        mocker.patch.object(client._client, "post", side_effect=Exception("timeout"))
        with pytest.raises(Exception, match="timeout"):
            await client.post("http://example.com")
        await client.aclose()

    async def test_context_manager(self):
        async with HttpClient() as client:
            assert client is not None


# ── ZeptoMailProvider ─────────────────────────────────────────────────────────


class TestZeptoMailProvider:
    def _make(self, token="test-token"):
        settings = EmailSettings(
            zepto_api_token=token,
            zepto_from_email="noreply@cwt.app",
            zepto_from_name="CWT",
        )
        http = MagicMock()
        provider = ZeptoMailProvider(
            settings,
            http,
            verification=VerificationSettings(max_attempts=4),
            app_name="CWT",
        )
        return provider, http

    async def test_sends_verification_email(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=201))

        assert await provider.send_verification_email("a@x.com", "Ada", "004312")

        kwargs = http.post.call_args.kwargs
        payload = kwargs["json"]
        assert payload["to"][0]["email_address"] == {"address": "a@x.com", "name": "Ada"}
        assert payload["subject"] == "CWT - Email Verification Code"
        assert "004312" in payload["htmlbody"]
        assert "004312" in payload["textbody"]
        assert "4 attempts" in payload["htmlbody"]
        assert kwargs["headers"]["Authorization"] == "Zoho-enczapikey test-token"

    async def test_existing_auth_prefix_kept(self):
        provider, http = self._make(token="Zoho-enczapikey abc")
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        await provider.send_verification_email("a@x.com", None, "123456")
        headers = http.post.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Zoho-enczapikey abc"

    async def test_recipient_name_falls_back_to_email(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        await provider.send_verification_email("a@x.com", None, "123456")
        payload = http.post.call_args.kwargs["json"]
        assert payload["to"][0]["email_address"]["name"] == "a@x.com"

    async def test_display_name_is_escaped(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        await provider.send_verification_email("a@x.com", "<b>Ada</b>", "123456")
        html = http.post.call_args.kwargs["json"]["htmlbody"]
        assert "<b>Ada</b>" not in html
        assert "&lt;b&gt;Ada&lt;/b&gt;" in html

    async def test_returns_false_without_token(self):
        provider, http = self._make(token="")
        http.post = AsyncMock()
        assert await provider.send_verification_email("a@x.com", None, "1") is False
        http.post.assert_not_called()

    async def test_returns_false_on_error_status(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=500, text="nope"))
        assert await provider.send_verification_email("a@x.com", None, "1") is False

    async def test_returns_false_on_network_error(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=Exception("connection reset"))
        assert await provider.send_verification_email("a@x.com", None, "1") is False


# ── UserRepository ────────────────────────────────────────────────────────────


class TestUserRepository:
    async def test_find_by_uid_maps_document(self):
        col = MagicMock()
        col.find_one = AsyncMock(
            return_value={
                "_id": ObjectId(),
                "uid": "u1",
                "email": "a@x.com",
                "emailVerified": True,
                "displayName": "Ada",
                "role": "student",
            }
        )
        user = await UserRepository(col).find_by_uid("u1")
        col.find_one.assert_awaited_once_with({"uid": "u1"})
        assert user.uid == "u1"
        assert user.email_verified is True
        assert user.display_name == "Ada"
        assert isinstance(user.id, str)

    async def test_find_by_uid_missing(self):
        col = MagicMock()
        col.find_one = AsyncMock(return_value=None)
        assert await UserRepository(col).find_by_uid("ghost") is None

    async def test_email_verified_defaults_false(self):
        col = MagicMock()
        col.find_one = AsyncMock(return_value={"uid": "u1", "email": "a@x.com"})
        user = await UserRepository(col).find_by_uid("u1")
        assert user.email_verified is False

    async def test_mark_email_verified(self):
        col = MagicMock()
        col.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
        assert await UserRepository(col).mark_email_verified("u1") is True

        query, update = col.update_one.call_args[0]
        assert query == {"uid": "u1"}
        assert update["$set"]["emailVerified"] is True
        assert "updatedAt" in update["$set"]

    async def test_mark_email_verified_no_match(self):
        col = MagicMock()
        col.update_one = AsyncMock(return_value=MagicMock(matched_count=0))
        assert await UserRepository(col).mark_email_verified("ghost") is False

    @pytest.mark.parametrize("method", ["find_one", "update_one"])
    async def test_driver_errors_become_unavailable(self, method):
        col = MagicMock()
        setattr(col, method, AsyncMock(side_effect=ServerSelectionTimeoutError("x")))
        repo = UserRepository(col)
        with pytest.raises(ServiceUnavailableError):
            if method == "find_one":
                await repo.find_by_uid("u1")
            else:
                await repo.mark_email_verified("u1")
