"""OAuth2 Client Credentials / Refresh Token auth plugin.

This module provides :class:`OAuth2AuthPlugin`, which implements the
``oauth2`` auth type. It asks its
:class:`~authfetch.auth.token_manager.OAuth2TokenManager` for a valid
access token -- served from the cache when possible, otherwise exchanged
at the configured ``token_url`` (:rfc:`6749` sections 4.4 and 6) -- and
returns an ``Authorization: Bearer <token>`` header.

A failed exchange raises :class:`~authfetch.exceptions.TokenError` and the
request is never sent.
"""

from __future__ import annotations

from typing import Optional

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.auth.token_manager import OAuth2TokenManager
from authfetch.models import OAuth2Auth


class OAuth2AuthPlugin(AuthPlugin):
    """Authenticate via an OAuth2 access token obtained and cached on demand.

    Args:
        token_manager: Manager owning the token cache. A new one (with its
            own empty cache) is created when omitted.
    """

    def __init__(self, token_manager: Optional[OAuth2TokenManager] = None) -> None:
        self._token_manager = token_manager or OAuth2TokenManager()

    @property
    def auth_type(self) -> str:
        return "oauth2"

    @property
    def token_manager(self) -> OAuth2TokenManager:
        return self._token_manager

    async def authenticate(self, method: OAuth2Auth) -> AuthResult:
        token = await self._token_manager.get_token(method)
        return AuthResult(headers={"Authorization": f"Bearer {token}"})
