"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~authfetch.exceptions.AuthFetchError` subclass.
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, including configuration errors."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""A credential could not be applied or an OAuth2 token could not be obtained."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
