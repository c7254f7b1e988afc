"""Bearer token authentication plugin.

This module provides :class:`BearerAuthPlugin`, which implements the
``bearer`` auth type. The configured token is injected as an
``Authorization: Bearer <token>`` header.

This plugin does not perform any token exchange or refresh -- it is
intended for tokens that are already available. For OAuth2-based token
acquisition, see :mod:`authfetch.plugins.oauth2`.
"""

from __future__ import annotations

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.models import BearerAuth


class BearerAuthPlugin(AuthPlugin):
    """Authenticate via Bearer token in the Authorization header."""

    @property
    def auth_type(self) -> str:
        return "bearer"

    async def authenticate(self, method: BearerAuth) -> AuthResult:
        return AuthResult(headers={"Authorization": f"Bearer {method.token}"})
