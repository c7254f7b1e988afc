"""Abstract base class for authentication plugins.

This module defines the two foundational types of the auth subsystem:

- :class:`AuthResult` -- a plain container for the HTTP headers, query
  parameters, and cookies that an auth plugin produces.
- :class:`AuthPlugin` -- the abstract base class that every authentication
  strategy must extend.

To implement a new auth strategy, subclass :class:`AuthPlugin`, set the
:attr:`~AuthPlugin.auth_type` property to the ``type`` tag of its
configuration model, and implement :meth:`~AuthPlugin.authenticate`.

See Also:
    :mod:`authfetch.auth.manager` for plugin registration and dispatch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class AuthResult:
    """Container for authentication artifacts to inject into HTTP requests.

    After a plugin authenticates, the resulting headers, query parameters,
    and cookies are collected here and later merged into the outgoing
    :class:`~authfetch.request.RequestDescriptor` by
    :meth:`~authfetch.auth.manager.AuthManager.apply`.

    Args:
        headers: HTTP headers to set (e.g. ``{"Authorization": "Bearer ..."}``).
        params: Query-string parameters to append (e.g. ``{"api_key": "..."}``).
        cookies: Cookies to send (serialised into a ``Cookie`` header).

    Example::

        result = AuthResult(headers={"Authorization": "Bearer tok123"})
        assert result.headers["Authorization"] == "Bearer tok123"
    """

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        cookies: dict[str, str] | None = None,
    ):
        self.headers = headers or {}
        self.params = params or {}
        self.cookies = cookies or {}


class AuthPlugin(ABC):
    """Abstract base class for authentication plugins.

    Every concrete auth strategy (API key, bearer token, OAuth2, etc.) must
    subclass this and provide:

    1. An :attr:`auth_type` property returning the ``type`` tag of the
       auth method it handles (e.g. ``"api_key"``, ``"oauth2"``).
    2. An async :meth:`authenticate` implementation that turns the auth
       method into an :class:`AuthResult`.

    Plugins are registered with :class:`~authfetch.auth.manager.AuthManager`
    and looked up by their ``auth_type`` at runtime.
    """

    @property
    @abstractmethod
    def auth_type(self) -> str:
        """Return the auth method ``type`` tag this plugin handles."""
        ...

    @abstractmethod
    async def authenticate(self, method: Any) -> AuthResult:
        """Produce the auth artifacts for a single request.

        Args:
            method: The rule's auth method model (one variant of
                :data:`~authfetch.models.AuthMethod`).

        Returns:
            An :class:`AuthResult` containing headers, params, and/or cookies
            to inject into the outgoing request.

        Raises:
            AuthError: If the credential cannot be produced.
        """
        ...
