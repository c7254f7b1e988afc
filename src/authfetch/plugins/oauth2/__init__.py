"""OAuth2 authentication plugin.

Implements the ``oauth2`` auth type, which performs the OAuth2 Client
Credentials grant (or a Refresh Token grant when a ``refresh_token`` is
configured) and sends the resulting access token as a bearer token.

Tokens are cached in memory and re-fetched lazily once they expire.

See Also:
    :class:`~authfetch.plugins.oauth2.plugin.OAuth2AuthPlugin`
    :mod:`authfetch.auth.token_manager` for the caching state machine.
"""

from authfetch.plugins.oauth2.plugin import OAuth2AuthPlugin

__all__ = ["OAuth2AuthPlugin"]
