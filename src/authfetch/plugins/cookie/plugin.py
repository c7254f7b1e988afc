"""Cookie authentication plugin.

The configured cookies are returned as :attr:`AuthResult.cookies`;
:meth:`~authfetch.auth.manager.AuthManager.apply` serialises them into a
single ``Cookie: k1=v1; k2=v2`` header in configuration order.
"""

from __future__ import annotations

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.models import CookieAuth


class CookieAuthPlugin(AuthPlugin):
    """Authenticate via static cookies."""

    @property
    def auth_type(self) -> str:
        return "cookie"

    async def authenticate(self, method: CookieAuth) -> AuthResult:
        return AuthResult(cookies=dict(method.cookies))
