"""API Key authentication plugin.

Implements the ``api_key`` auth type, which injects a static API key into
outgoing requests as a header or a query parameter.

See Also:
    :class:`~authfetch.plugins.api_key.plugin.APIKeyAuthPlugin`
    :mod:`authfetch.auth.base` for the plugin interface contract.
"""

from authfetch.plugins.api_key.plugin import APIKeyAuthPlugin

__all__ = ["APIKeyAuthPlugin"]
