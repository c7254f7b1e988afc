"""Plugin-based authentication system for authfetch.

This package turns a rule's auth method into request headers, query
parameters, or cookies. One plugin handles each auth type -- bearer,
api_key, basic, cookie, function, and oauth2.

The main entry points are:

- :class:`AuthPlugin` -- abstract base class for implementing new auth strategies.
- :class:`AuthManager` -- registry that maps auth type strings to plugin instances
  and applies a method to a :class:`~authfetch.request.RequestDescriptor`.
- :func:`create_default_manager` -- factory that returns an :class:`AuthManager`
  pre-loaded with all built-in plugins.
- :class:`OAuth2TokenManager` and :class:`TokenCache` -- OAuth2 token
  acquisition and in-memory caching.

Typical usage::

    from authfetch.auth import create_default_manager

    manager = create_default_manager()
    await manager.apply(rule.auth, request)
"""

from authfetch.auth.base import AuthPlugin, AuthResult
from authfetch.auth.manager import AuthManager, create_default_manager
from authfetch.auth.token_manager import OAuth2TokenManager, TokenCache, TokenCacheEntry

__all__ = [
    "AuthPlugin",
    "AuthResult",
    "AuthManager",
    "OAuth2TokenManager",
    "TokenCache",
    "TokenCacheEntry",
    "create_default_manager",
]
