"""OAuth2 token acquisition and caching.

:class:`OAuth2TokenManager` returns a currently valid access token for an
:class:`~authfetch.models.OAuth2Auth` method, performing a token exchange
only when the cache has no usable entry.

Cache entries are keyed by ``(token_url, client_id)`` and move through
three states:

* **absent** -- no exchange has succeeded yet.
* **valid** -- ``now < expires_at``; served without network I/O.
* **stale** -- ``now >= expires_at``; ignored (not evicted) and overwritten
  by the next successful exchange.

``expires_at`` is set 60 seconds before the server-reported expiry so that
a token is never sent right at the edge of its validity. Refresh happens
lazily on the first request after a token goes stale; there is no
background refresh and no automatic retry. Failed exchanges are never
cached.

The cache is an explicit :class:`TokenCache` object so that callers (and
tests) decide its lifetime. It holds at most one entry per distinct
``(token_url, client_id)`` pair in the configuration.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from authfetch.exceptions import TokenError
from authfetch.models import OAuth2Auth

logger = logging.getLogger(__name__)

EXPIRY_SAFETY_MARGIN = 60
"""Seconds subtracted from ``expires_in`` before a token is considered stale."""

DEFAULT_EXPIRES_IN = 3600
"""Lifetime assumed when the token endpoint omits ``expires_in``."""


@dataclass
class TokenCacheEntry:
    """A cached access token and the clock reading at which it goes stale."""

    access_token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TokenCache:
    """In-memory token store keyed by ``(token_url, client_id)``.

    There is no locking: concurrent misses on the same key may each perform
    an exchange, and the last one to finish wins.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], TokenCacheEntry] = {}

    def get(self, key: tuple[str, str]) -> Optional[TokenCacheEntry]:
        return self._entries.get(key)

    def set(self, key: tuple[str, str], entry: TokenCacheEntry) -> None:
        self._entries[key] = entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class OAuth2TokenManager:
    """Fetch and cache OAuth2 access tokens.

    Args:
        cache: Token cache to use. A fresh one is created when omitted.
        transport: Optional :class:`httpx.AsyncBaseTransport` for the token
            exchange (tests pass :class:`httpx.MockTransport`).
        clock: Monotonic clock returning seconds; injectable for tests.

    Example::

        manager = OAuth2TokenManager()
        token = await manager.get_token(OAuth2Auth(
            token_url="https://auth.example.com/token",
            client_id="cid",
            client_secret="secret",
        ))
    """

    def __init__(
        self,
        cache: Optional[TokenCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache = cache if cache is not None else TokenCache()
        self._transport = transport
        self._clock = clock

    @property
    def cache(self) -> TokenCache:
        return self._cache

    async def get_token(self, auth: OAuth2Auth) -> str:
        """Return a valid access token, exchanging credentials if needed.

        Args:
            auth: The OAuth2 method of the matched rule.

        Returns:
            The access token string.

        Raises:
            TokenError: If the token endpoint returns a non-2xx status, an
                unparseable body, or cannot be reached.
        """
        key = (auth.token_url, auth.client_id)
        entry = self._cache.get(key)
        if entry is not None and entry.is_valid(self._clock()):
            return entry.access_token

        token_data = await self._fetch_token(auth)
        access_token = token_data["access_token"]
        try:
            expires_in = float(token_data.get("expires_in", DEFAULT_EXPIRES_IN))
        except (TypeError, ValueError) as exc:
            raise TokenError(
                f"Failed to fetch OAuth2 token: invalid expires_in {token_data.get('expires_in')!r}"
            ) from exc
        self._cache.set(
            key,
            TokenCacheEntry(
                access_token=access_token,
                expires_at=self._clock() + (expires_in - EXPIRY_SAFETY_MARGIN),
            ),
        )
        logger.debug(
            "Cached OAuth2 token for client %s at %s (expires in %ss)",
            auth.client_id,
            auth.token_url,
            expires_in,
        )
        return access_token

    @staticmethod
    def build_token_request(auth: OAuth2Auth) -> dict[str, str]:
        """Build the form fields for the token endpoint.

        ``grant_type`` is ``refresh_token`` when a refresh token is
        configured, ``client_credentials`` otherwise.
        """
        data: dict[str, str] = {
            "client_id": auth.client_id,
            "client_secret": auth.client_secret,
        }
        if auth.scope:
            data["scope"] = auth.scope
        if auth.refresh_token:
            data["grant_type"] = "refresh_token"
            data["refresh_token"] = auth.refresh_token
        else:
            data["grant_type"] = "client_credentials"
        return data

    async def _fetch_token(self, auth: OAuth2Auth) -> dict[str, Any]:
        """POST to the token endpoint and return the JSON response."""
        data = self.build_token_request(auth)
        logger.debug("Requesting OAuth2 token (%s) from %s", data["grant_type"], auth.token_url)

        try:
            # No timeout on the exchange: only the resource request is bounded.
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                response = await client.post(
                    auth.token_url,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as exc:
            raise TokenError(f"Failed to fetch OAuth2 token: {exc}") from exc

        if not response.is_success:
            raise TokenError(
                f"Failed to fetch OAuth2 token: {response.status_code} "
                f"{response.reason_phrase} - {response.text}"
            )

        try:
            token_data = response.json()
        except ValueError as exc:
            raise TokenError(f"Failed to fetch OAuth2 token: invalid JSON response: {exc}") from exc

        if not isinstance(token_data, dict) or "access_token" not in token_data:
            raise TokenError("Failed to fetch OAuth2 token: response missing 'access_token' field")

        return token_data
