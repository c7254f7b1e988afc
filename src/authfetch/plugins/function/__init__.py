"""Callback authentication plugin.

Implements the ``function`` auth type, which asks a user-supplied callable
for the credential on every request.

See Also:
    :class:`~authfetch.plugins.function.plugin.FunctionAuthPlugin`
"""

from authfetch.plugins.function.plugin import FunctionAuthPlugin

__all__ = ["FunctionAuthPlugin"]
