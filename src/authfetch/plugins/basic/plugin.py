"""HTTP Basic authentication plugin.

This module provides :class:`BasicAuthPlugin`, which implements the
``basic`` auth type. The configured username and password are joined with
a colon, Base64-encoded, and sent as an ``Authorization: Basic <encoded>``
header per :rfc:`7617`.
"""

from __future__ import annotations

import base64

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.models import BasicAuth


class BasicAuthPlugin(AuthPlugin):
    """Authenticate via HTTP Basic authentication."""

    @property
    def auth_type(self) -> str:
        return "basic"

    async def authenticate(self, method: BasicAuth) -> AuthResult:
        raw = f"{method.username}:{method.password}"
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return AuthResult(headers={"Authorization": f"Basic {encoded}"})
