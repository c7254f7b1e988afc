"""Tests for the built-in auth plugins and the AuthManager."""

from __future__ import annotations

import base64

import httpx
import pytest

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.auth.manager import AuthManager, create_default_manager
from authfetch.auth.token_manager import OAuth2TokenManager
from authfetch.exceptions import AuthError, TokenError
from authfetch.models import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    CookieAuth,
    FunctionAuth,
    OAuth2Auth,
)
from authfetch.plugins.api_key import APIKeyAuthPlugin
from authfetch.plugins.basic import BasicAuthPlugin
from authfetch.plugins.bearer import BearerAuthPlugin
from authfetch.plugins.cookie import CookieAuthPlugin
from authfetch.plugins.function import FunctionAuthPlugin
from authfetch.plugins.oauth2 import OAuth2AuthPlugin
from authfetch.request import RequestDescriptor


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_request(url: str = "https://api.example.com/v1", **headers: str) -> RequestDescriptor:
    return RequestDescriptor(url=url, headers=dict(headers))


def _make_oauth2(**overrides: str) -> OAuth2Auth:
    fields = {
        "token_url": "https://auth.example.com/token",
        "client_id": "cid",
        "client_secret": "secret",
    }
    fields.update(overrides)
    return OAuth2Auth(**fields)


def _token_transport(token: str = "oauth-token") -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": token, "expires_in": 3600})

    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# Individual plugins
# ---------------------------------------------------------------------------


class TestBearerAuthPlugin:
    @pytest.mark.asyncio
    async def test_authorization_header(self) -> None:
        result = await BearerAuthPlugin().authenticate(BearerAuth(token="abc"))
        assert result.headers == {"Authorization": "Bearer abc"}

    def test_auth_type(self) -> None:
        assert BearerAuthPlugin().auth_type == "bearer"


class TestAPIKeyAuthPlugin:
    @pytest.mark.asyncio
    async def test_header(self) -> None:
        result = await APIKeyAuthPlugin().authenticate(
            ApiKeyAuth(key="X-API-Key", value="k1", location="header")
        )
        assert result.headers == {"X-API-Key": "k1"}
        assert result.params == {}

    @pytest.mark.asyncio
    async def test_query(self) -> None:
        result = await APIKeyAuthPlugin().authenticate(
            ApiKeyAuth(key="api_key", value="k1", location="query")
        )
        assert result.params == {"api_key": "k1"}
        assert result.headers == {}


class TestBasicAuthPlugin:
    @pytest.mark.asyncio
    async def test_encodes_credentials(self) -> None:
        result = await BasicAuthPlugin().authenticate(BasicAuth(username="alice", password="s3:cret"))
        expected = base64.b64encode(b"alice:s3:cret").decode()
        assert result.headers == {"Authorization": f"Basic {expected}"}

    @pytest.mark.asyncio
    async def test_utf8_credentials(self) -> None:
        result = await BasicAuthPlugin().authenticate(BasicAuth(username="josé", password="p"))
        encoded = result.headers["Authorization"].removeprefix("Basic ")
        assert base64.b64decode(encoded).decode("utf-8") == "josé:p"


class TestCookieAuthPlugin:
    @pytest.mark.asyncio
    async def test_returns_cookies(self) -> None:
        result = await CookieAuthPlugin().authenticate(CookieAuth(cookies={"a": "1", "b": "2"}))
        assert result.cookies == {"a": "1", "b": "2"}


class TestFunctionAuthPlugin:
    @pytest.mark.asyncio
    async def test_token_result_becomes_bearer(self) -> None:
        result = await FunctionAuthPlugin().authenticate(
            FunctionAuth(function=lambda: {"token": "fn-token"})
        )
        assert result.headers == {"Authorization": "Bearer fn-token"}

    @pytest.mark.asyncio
    async def test_header_mapping_is_merged(self) -> None:
        result = await FunctionAuthPlugin().authenticate(
            FunctionAuth(function=lambda: {"X-Signature": "sig", "X-Time": "1"})
        )
        assert result.headers == {"X-Signature": "sig", "X-Time": "1"}

    @pytest.mark.asyncio
    async def test_coroutine_function_is_awaited(self) -> None:
        async def produce() -> dict[str, str]:
            return {"token": "async-token"}

        result = await FunctionAuthPlugin().authenticate(FunctionAuth(function=produce))
        assert result.headers == {"Authorization": "Bearer async-token"}

    @pytest.mark.asyncio
    async def test_non_mapping_result_rejected(self) -> None:
        with pytest.raises(AuthError, match="must return a mapping"):
            await FunctionAuthPlugin().authenticate(FunctionAuth(function=lambda: "token"))


class TestOAuth2AuthPlugin:
    @pytest.mark.asyncio
    async def test_bearer_from_token_manager(self) -> None:
        plugin = OAuth2AuthPlugin(OAuth2TokenManager(transport=_token_transport("tok-1")))
        result = await plugin.authenticate(_make_oauth2())
        assert result.headers == {"Authorization": "Bearer tok-1"}

    def test_creates_token_manager_when_omitted(self) -> None:
        plugin = OAuth2AuthPlugin()
        assert isinstance(plugin.token_manager, OAuth2TokenManager)
        assert len(plugin.token_manager.cache) == 0


# ---------------------------------------------------------------------------
# AuthManager
# ---------------------------------------------------------------------------


class TestAuthManager:
    @pytest.mark.parametrize(
        "auth_type, plugin_class",
        [
            ("bearer", BearerAuthPlugin),
            ("api_key", APIKeyAuthPlugin),
            ("basic", BasicAuthPlugin),
            ("cookie", CookieAuthPlugin),
            ("function", FunctionAuthPlugin),
            ("oauth2", OAuth2AuthPlugin),
        ],
    )
    def test_default_manager_registers_every_kind(self, auth_type: str, plugin_class: type) -> None:
        plugin = create_default_manager().get_plugin(auth_type)
        assert isinstance(plugin, plugin_class)

    def test_default_manager_shares_token_manager(self) -> None:
        token_manager = OAuth2TokenManager()
        manager = create_default_manager(token_manager)
        plugin = manager.get_plugin("oauth2")
        assert isinstance(plugin, OAuth2AuthPlugin)
        assert plugin.token_manager is token_manager

    def test_unknown_type(self) -> None:
        manager = AuthManager()
        manager.register(BearerAuthPlugin())
        with pytest.raises(AuthError, match="No auth plugin registered for type 'basic'"):
            manager.get_plugin("basic")

    @pytest.mark.asyncio
    async def test_apply_header_overrides_caller_case_insensitively(self) -> None:
        request = _make_request(authorization="Bearer caller")
        await create_default_manager().apply(BearerAuth(token="rule"), request)
        assert request.headers == {"Authorization": "Bearer rule"}

    @pytest.mark.asyncio
    async def test_apply_query_param_keeps_existing(self) -> None:
        request = _make_request("https://api.example.com/v1/items?page=2&sort=asc")
        await create_default_manager().apply(
            ApiKeyAuth(key="api_key", value="k1", location="query"), request
        )
        url = httpx.URL(request.url)
        assert url.params.get("page") == "2"
        assert url.params.get("sort") == "asc"
        assert url.params.get("api_key") == "k1"
        assert url.path == "/v1/items"

    @pytest.mark.asyncio
    async def test_apply_cookie_header_in_order(self) -> None:
        request = _make_request()
        await create_default_manager().apply(
            CookieAuth(cookies={"session": "s1", "theme": "dark"}), request
        )
        assert request.headers["Cookie"] == "session=s1; theme=dark"

    @pytest.mark.asyncio
    async def test_callback_exception_becomes_auth_error(self) -> None:
        def broken() -> dict[str, str]:
            raise RuntimeError("vault unreachable")

        request = _make_request(Accept="application/json")
        with pytest.raises(AuthError, match="vault unreachable"):
            await create_default_manager().apply(FunctionAuth(function=broken), request)
        assert request.headers == {"Accept": "application/json"}

    @pytest.mark.asyncio
    async def test_token_error_propagates_unwrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="denied")

        manager = create_default_manager(OAuth2TokenManager(transport=httpx.MockTransport(handler)))
        with pytest.raises(TokenError, match="401 Unauthorized - denied"):
            await manager.apply(_make_oauth2(), _make_request())

    @pytest.mark.asyncio
    async def test_custom_plugin(self) -> None:
        class StaticPlugin(AuthPlugin):
            @property
            def auth_type(self) -> str:
                return "bearer"

            async def authenticate(self, method: BearerAuth) -> AuthResult:
                return AuthResult(headers={"X-Static": method.token})

        manager = AuthManager()
        manager.register(StaticPlugin())
        request = await manager.apply(BearerAuth(token="t"), _make_request())
        assert request.headers == {"X-Static": "t"}

