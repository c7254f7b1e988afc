"""HTTP Basic authentication plugin.

Implements the ``basic`` auth type, which Base64-encodes
``username:password`` and sends it as an ``Authorization: Basic`` header.

See Also:
    :class:`~authfetch.plugins.basic.plugin.BasicAuthPlugin`
    :mod:`authfetch.auth.base` for the plugin interface contract.
"""

from authfetch.plugins.basic.plugin import BasicAuthPlugin

__all__ = ["BasicAuthPlugin"]
