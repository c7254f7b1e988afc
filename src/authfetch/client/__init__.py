"""Request dispatch for authfetch.

Provides :class:`AuthFetcher`, which loads the rules file, applies the
matching rule's credential and dispatches the request through
:mod:`httpx`, plus the module-level :func:`fetch_url` and
:func:`test_auth` conveniences backed by a process-wide default fetcher.

Example::

    from authfetch.client import AuthFetcher

    fetcher = AuthFetcher()
    body = await fetcher.fetch_url("https://api.example.com/v1/me")
"""

from authfetch.client.fetcher import (
    DEFAULT_TIMEOUT_MS,
    AuthFetcher,
    fetch_url,
    get_fetcher,
    reset_fetcher,
    set_fetcher,
    test_auth,
)

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "AuthFetcher",
    "fetch_url",
    "get_fetcher",
    "reset_fetcher",
    "set_fetcher",
    "test_auth",
]
