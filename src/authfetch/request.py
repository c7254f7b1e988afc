"""Mutable request descriptor threaded through auth application.

A :class:`RequestDescriptor` is created once per
:meth:`~authfetch.client.fetcher.AuthFetcher.fetch_url` call, mutated by
global settings and by :meth:`~authfetch.auth.manager.AuthManager.apply`,
and then handed to the HTTP transport. It is discarded when the call
completes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import httpx


@dataclass
class RequestDescriptor:
    """Pending outbound request.

    Attributes:
        url: Absolute request URL. Rewritten when a credential is placed
            in the query string.
        method: HTTP method (e.g. ``"GET"``).
        headers: Request headers. Use :meth:`set_header` to replace a
            header regardless of the caller's capitalisation.
        body: Optional raw request body.
        timeout: Effective timeout in milliseconds.
    """

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    timeout: float = 0

    def set_header(self, name: str, value: str) -> None:
        """Set *name* to *value*, dropping any header that differs only in case."""
        lowered = name.lower()
        for existing in [k for k in self.headers if k.lower() == lowered]:
            del self.headers[existing]
        self.headers[name] = value

    def add_query_param(self, key: str, value: str) -> None:
        """Append ``key=value`` to the URL's query string, keeping existing parameters."""
        self.url = str(httpx.URL(self.url).copy_add_param(key, value))
