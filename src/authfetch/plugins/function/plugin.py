"""Callback authentication plugin.

This module provides :class:`FunctionAuthPlugin`, which implements the
``function`` auth type. The rule's zero-argument callable is invoked for
every request (coroutine functions are awaited) and must return a mapping:

* ``{"token": "..."}`` -- sent as ``Authorization: Bearer <token>``.
* any other mapping -- merged into the request headers as-is, so the
  callable decides the header names.

Exceptions raised by the callable propagate to
:meth:`~authfetch.auth.manager.AuthManager.authenticate`, which reports
them as :class:`~authfetch.exceptions.AuthError`.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.exceptions import AuthError
from authfetch.models import FunctionAuth


class FunctionAuthPlugin(AuthPlugin):
    """Authenticate with a credential produced by a callback."""

    @property
    def auth_type(self) -> str:
        return "function"

    async def authenticate(self, method: FunctionAuth) -> AuthResult:
        result = method.function()
        if inspect.isawaitable(result):
            result = await result

        if not isinstance(result, Mapping):
            raise AuthError(
                "Auth function must return a mapping of headers or {'token': ...}, "
                f"got {type(result).__name__}"
            )
        if "token" in result:
            return AuthResult(headers={"Authorization": f"Bearer {result['token']}"})
        return AuthResult(headers={str(k): str(v) for k, v in result.items()})
