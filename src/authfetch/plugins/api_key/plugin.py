"""API Key auth plugin -- supports header and query parameter placement.

This module provides the :class:`APIKeyAuthPlugin`, which places the
configured ``key``/``value`` pair at the configured location:

* ``"header"`` -- sent as a request header named ``key``.
* ``"query"``  -- appended to the URL's query string as ``key=value``;
  existing query parameters are preserved.

See Also:
    :class:`authfetch.auth.base.AuthPlugin` for the base interface.
"""

from __future__ import annotations

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.models import ApiKeyAuth


class APIKeyAuthPlugin(AuthPlugin):
    """Authenticate via API key placed in a header or query parameter."""

    @property
    def auth_type(self) -> str:
        return "api_key"

    async def authenticate(self, method: ApiKeyAuth) -> AuthResult:
        if method.location == "query":
            return AuthResult(params={method.key: method.value})
        return AuthResult(headers={method.key: method.value})
