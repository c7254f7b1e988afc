"""Exception hierarchy for authfetch.

All exceptions inherit from :class:`AuthFetchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`authfetch.exit_codes`.
The CLI entry point :func:`authfetch.app.main` catches ``AuthFetchError``
and exits with the appropriate code.

The public request functions (:func:`~authfetch.client.fetcher.fetch_url`
and :func:`~authfetch.client.fetcher.test_auth`) never let these escape;
they are converted into descriptive strings at that boundary.

Subclass hierarchy::

    AuthFetchError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- AuthError           (exit 3)
    |   +-- TokenError      (exit 3)
    +-- ConnectionError_    (exit 6)
"""

from authfetch.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class AuthFetchError(Exception):
    """Base exception for all authfetch errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AuthFetchError):
    """Raised for invalid CLI arguments (e.g. a malformed ``-H`` header)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(AuthFetchError):
    """Raised when the rules file cannot be read, substituted, parsed, or validated."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(AuthFetchError):
    """Raised when a credential cannot be applied to a request."""

    exit_code = EXIT_AUTH_FAILURE


class TokenError(AuthError):
    """Raised when an OAuth2 token exchange fails (non-2xx, bad body, network)."""


class ConnectionError_(AuthFetchError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR
