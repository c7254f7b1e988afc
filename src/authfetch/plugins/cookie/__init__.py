"""Cookie authentication plugin.

Implements the ``cookie`` auth type, which sends a fixed set of cookies
(e.g. a captured session) with every matching request.

See Also:
    :class:`~authfetch.plugins.cookie.plugin.CookieAuthPlugin`
"""

from authfetch.plugins.cookie.plugin import CookieAuthPlugin

__all__ = ["CookieAuthPlugin"]
