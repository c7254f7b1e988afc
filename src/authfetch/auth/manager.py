"""Auth manager -- registry and dispatcher for auth plugins.

The :class:`AuthManager` is the central coordinator of the authentication
subsystem. It maintains a mapping from auth-type strings (``"bearer"``,
``"api_key"``, ``"oauth2"``, etc.) to concrete
:class:`~authfetch.auth.base.AuthPlugin` instances and exposes
:meth:`~AuthManager.apply`, which the request dispatcher calls to embed a
rule's credential into a pending request.

For most use cases, call :func:`create_default_manager` to get a manager
pre-loaded with a plugin for every auth type in
:data:`~authfetch.models.AuthMethod`.

See Also:
    :class:`~authfetch.auth.base.AuthPlugin` -- the plugin interface.
    :class:`~authfetch.client.fetcher.AuthFetcher` -- the caller.
"""

from __future__ import annotations

from typing import Optional

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.auth.token_manager import OAuth2TokenManager
from authfetch.exceptions import AuthError
from authfetch.models import AuthMethod
from authfetch.request import RequestDescriptor


class AuthManager:
    """Registry and dispatcher for authentication plugins.

    Plugins are registered by their :attr:`~AuthPlugin.auth_type` string.

    Example::

        from authfetch.auth import AuthManager
        from authfetch.plugins.bearer import BearerAuthPlugin

        manager = AuthManager()
        manager.register(BearerAuthPlugin())
        await manager.apply(rule.auth, request)
    """

    def __init__(self) -> None:
        self._plugins: dict[str, AuthPlugin] = {}

    def register(self, plugin: AuthPlugin) -> None:
        """Register an auth plugin, keyed by its :attr:`~AuthPlugin.auth_type`.

        If a plugin for the same type is already registered it is silently
        replaced.
        """
        self._plugins[plugin.auth_type] = plugin

    def get_plugin(self, auth_type: str) -> AuthPlugin:
        """Retrieve a registered plugin by its auth type identifier.

        Raises:
            AuthError: If no plugin is registered for *auth_type*.
        """
        plugin = self._plugins.get(auth_type)
        if plugin is None:
            available = ", ".join(sorted(self._plugins)) or "(none)"
            raise AuthError(
                f"No auth plugin registered for type '{auth_type}'. "
                f"Available types: {available}"
            )
        return plugin

    async def authenticate(self, method: AuthMethod) -> AuthResult:
        """Produce the auth artifacts for *method* via its plugin.

        Any exception raised by the plugin (including one from a
        user-supplied ``function`` callback) is converted to
        :class:`~authfetch.exceptions.AuthError`.
        """
        plugin = self.get_plugin(method.type)
        try:
            return await plugin.authenticate(method)
        except AuthError:
            raise
        except Exception as exc:
            raise AuthError(str(exc) or type(exc).__name__) from exc

    async def apply(self, method: AuthMethod, request: RequestDescriptor) -> RequestDescriptor:
        """Embed the credential described by *method* into *request*.

        Headers produced by the plugin replace caller-supplied headers of the
        same name, query parameters are appended to the URL, and cookies are
        serialised into a single ``Cookie`` header. *request* is only
        modified once the plugin has succeeded.

        Args:
            method: The matched rule's auth method.
            request: The pending request, mutated in place.

        Returns:
            The same *request* object.

        Raises:
            AuthError: If the credential cannot be produced.
        """
        result = await self.authenticate(method)

        for name, value in result.headers.items():
            request.set_header(name, value)
        for key, value in result.params.items():
            request.add_query_param(key, value)
        if result.cookies:
            request.set_header(
                "Cookie", "; ".join(f"{k}={v}" for k, v in result.cookies.items())
            )
        return request


def create_default_manager(
    token_manager: Optional[OAuth2TokenManager] = None,
) -> AuthManager:
    """Create an :class:`AuthManager` pre-loaded with all built-in plugins.

    The following plugins are registered:

    - ``bearer`` -- static bearer token.
    - ``api_key`` -- static API key in a header or the query string.
    - ``basic`` -- HTTP Basic authentication.
    - ``cookie`` -- static cookies.
    - ``function`` -- credential produced by a callback.
    - ``oauth2`` -- client-credentials / refresh-token grant with caching.

    Args:
        token_manager: OAuth2 token manager (and therefore token cache) to
            share. A new one is created when omitted.

    Returns:
        A fully initialised :class:`AuthManager`.
    """
    from authfetch.plugins.api_key import APIKeyAuthPlugin
    from authfetch.plugins.basic import BasicAuthPlugin
    from authfetch.plugins.bearer import BearerAuthPlugin
    from authfetch.plugins.cookie import CookieAuthPlugin
    from authfetch.plugins.function import FunctionAuthPlugin
    from authfetch.plugins.oauth2 import OAuth2AuthPlugin

    manager = AuthManager()
    manager.register(BearerAuthPlugin())
    manager.register(APIKeyAuthPlugin())
    manager.register(BasicAuthPlugin())
    manager.register(CookieAuthPlugin())
    manager.register(FunctionAuthPlugin())
    manager.register(OAuth2AuthPlugin(token_manager))
    return manager
