"""Bearer token authentication plugin.

Implements the ``bearer`` auth type, which sends a static token as an
``Authorization: Bearer`` header.

See Also:
    :class:`~authfetch.plugins.bearer.plugin.BearerAuthPlugin`
    :mod:`authfetch.auth.base` for the plugin interface contract.
"""

from authfetch.plugins.bearer.plugin import BearerAuthPlugin

__all__ = ["BearerAuthPlugin"]
