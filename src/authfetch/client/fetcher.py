"""Authenticated request dispatcher.

:class:`AuthFetcher` implements the two public operations:

* :meth:`AuthFetcher.fetch_url` -- load the rules, pick the matching rule,
  inject its credential, and perform the request with a deadline.
* :meth:`AuthFetcher.test_auth` -- report which rule would apply to a URL,
  with secrets masked unless ``verbose_test_auth`` is set.

Neither operation raises. Failures are returned as descriptive strings
(``fetch_url``) or in :attr:`~authfetch.models.AuthTestResult.error`
(``test_auth``) so that they can be handed straight back to a tool caller.

The rules file is re-read on every call; the OAuth2 token cache, owned by
the fetcher's :class:`~authfetch.auth.manager.AuthManager`, is the only
state that survives between calls.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

import httpx

from authfetch.auth.manager import AuthManager, create_default_manager
from authfetch.config import find_config_file, load_config
from authfetch.exceptions import AuthError, ConnectionError_
from authfetch.masking import mask_rule
from authfetch.matching import find_matching_rule
from authfetch.models import AuthFetchConfig, AuthTestResult, GlobalSettings
from authfetch.request import RequestDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000
"""Request timeout used when neither the caller nor the config sets one."""

ConfigLoader = Callable[[], tuple[AuthFetchConfig, Optional[Path]]]


def _default_config_loader() -> tuple[AuthFetchConfig, Optional[Path]]:
    path = find_config_file()
    return load_config(path), path


def _format_ms(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class AuthFetcher:
    """Fetch URLs with credentials chosen by URL-matching rules.

    Args:
        config_loader: Zero-argument callable returning the configuration
            and the path it came from. Defaults to discovering and loading
            the rules file via :mod:`authfetch.config`.
        auth_manager: Auth plugin registry. Defaults to
            :func:`~authfetch.auth.manager.create_default_manager`, which
            owns a fresh OAuth2 token cache.
        transport: Optional :class:`httpx.AsyncBaseTransport` for the
            resource request (tests pass :class:`httpx.MockTransport`).

    Example::

        fetcher = AuthFetcher()
        body = await fetcher.fetch_url("https://api.github.com/user")
        print(fetcher.test_auth("https://api.github.com/user").to_json())
    """

    def __init__(
        self,
        config_loader: Optional[ConfigLoader] = None,
        auth_manager: Optional[AuthManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config_loader = config_loader or _default_config_loader
        self._auth_manager = auth_manager or create_default_manager()
        self._transport = transport

    @property
    def auth_manager(self) -> AuthManager:
        return self._auth_manager

    # ------------------------------------------------------------------
    # fetch_url
    # ------------------------------------------------------------------

    async def fetch_url(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[dict[str, str]] = None,
        body: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Fetch *url*, applying the credential of the matching rule.

        Args:
            url: Absolute request URL.
            method: HTTP method.
            headers: Caller-supplied headers. Credential headers and the
                configured ``user_agent`` take precedence over them.
            body: Optional raw request body.
            timeout: Deadline in milliseconds. Falls back to
                ``global_settings.default_timeout``, then
                :data:`DEFAULT_TIMEOUT_MS`.

        Returns:
            The response body as text (whatever the status code), or a
            message describing why the request could not be completed.
        """
        try:
            config, _ = self._config_loader()
        except Exception as exc:
            logger.debug("Could not load auth rules: %s", exc)
            return str(exc) or type(exc).__name__

        settings = config.global_settings
        rule = find_matching_rule(url, config.auth_rules)

        request = RequestDescriptor(url=url, method=method, headers=dict(headers or {}), body=body)
        if settings.user_agent:
            request.set_header("User-Agent", settings.user_agent)

        if rule is not None:
            try:
                await self._auth_manager.apply(rule.auth, request)
            except AuthError as exc:
                logger.debug("Authentication failed for %s: %s", url, exc)
                return f"Authentication failed: {exc}"
            except httpx.InvalidURL as exc:
                return str(exc)
        else:
            logger.debug("No auth rule matched %s, sending unauthenticated", url)

        if timeout is not None:
            request.timeout = timeout
        elif settings.default_timeout is not None:
            request.timeout = settings.default_timeout
        else:
            request.timeout = DEFAULT_TIMEOUT_MS

        try:
            response = await self._execute_with_retry(request, settings)
        except asyncio.TimeoutError:
            return f"Request timed out after {_format_ms(request.timeout)}ms"
        except ConnectionError_ as exc:
            return str(exc)

        return response.text

    async def _send(self, request: RequestDescriptor) -> httpx.Response:
        # The deadline is enforced by wait_for in _execute_with_retry.
        async with httpx.AsyncClient(
            transport=self._transport, timeout=None, follow_redirects=True
        ) as client:
            return await client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )

    async def _execute_with_retry(
        self, request: RequestDescriptor, settings: GlobalSettings
    ) -> httpx.Response:
        """Send *request* under its deadline, retrying connection failures.

        Connection-level errors are retried up to ``settings.max_retries``
        times with :func:`asyncio.sleep` between attempts; the delay doubles
        each attempt: 1 s, 2 s, 4 s, ... Timeouts and unsupported URL schemes
        are never retried.

        The deadline applies to each attempt separately and the backoff
        sleeps are not counted against it, so with retries enabled a call can
        take up to ``(max_retries + 1) * timeout`` plus the backoff delays.

        Raises:
            asyncio.TimeoutError: If the deadline expires.
            ConnectionError_: If the request fails for any other reason.
        """
        max_retries = settings.max_retries or 0
        deadline = request.timeout / 1000

        for attempt in range(max_retries + 1):
            try:
                logger.debug("%s %s (attempt %d)", request.method, request.url, attempt + 1)
                return await asyncio.wait_for(self._send(request), deadline)
            except asyncio.TimeoutError:
                raise
            except httpx.TimeoutException as exc:
                raise asyncio.TimeoutError() from exc
            except httpx.UnsupportedProtocol as exc:
                raise ConnectionError_(str(exc) or type(exc).__name__) from exc
            except httpx.TransportError as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    logger.debug(
                        "Connection error: %s, retrying in %ss (attempt %d/%d)",
                        exc,
                        delay,
                        attempt + 1,
                        max_retries,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise ConnectionError_(str(exc) or type(exc).__name__) from exc
            except Exception as exc:
                # Includes UnicodeEncodeError for non-ASCII header values.
                raise ConnectionError_(str(exc) or type(exc).__name__) from exc

        raise ConnectionError_("Request failed after all retries")  # pragma: no cover

    # ------------------------------------------------------------------
    # test_auth
    # ------------------------------------------------------------------

    def test_auth(self, url: str) -> AuthTestResult:
        """Report the rule that would authenticate a request to *url*.

        Secrets are masked and only the config file's name is reported,
        unless ``global_settings.verbose_test_auth`` is set.
        """
        try:
            config, path = self._config_loader()
            rule = find_matching_rule(url, config.auth_rules)

            if rule is not None and not config.global_settings.verbose_test_auth:
                return AuthTestResult(
                    rule=mask_rule(rule),
                    config_file=path.name if path is not None else None,
                )

            return AuthTestResult(
                rule=rule,
                config_file=str(path) if path is not None else "No config file found",
            )
        except Exception as exc:
            logger.debug("test_auth failed for %s: %s", url, exc)
            return AuthTestResult(rule=None, error=str(exc) or type(exc).__name__)


# ---------------------------------------------------------------------------
# Process-wide default fetcher
# ---------------------------------------------------------------------------

_fetcher: Optional[AuthFetcher] = None


def get_fetcher() -> AuthFetcher:
    """Return the process-wide :class:`AuthFetcher`, creating it on first use."""
    global _fetcher
    if _fetcher is None:
        _fetcher = AuthFetcher()
    return _fetcher


def set_fetcher(fetcher: AuthFetcher) -> None:
    """Replace the process-wide :class:`AuthFetcher`."""
    global _fetcher
    _fetcher = fetcher


def reset_fetcher() -> None:
    """Drop the process-wide fetcher (and with it the token cache)."""
    global _fetcher
    _fetcher = None


async def fetch_url(
    url: str,
    method: str = "GET",
    headers: Optional[dict[str, str]] = None,
    body: Optional[str] = None,
    timeout: Optional[float] = None,
) -> str:
    """Fetch *url* with the default fetcher. See :meth:`AuthFetcher.fetch_url`."""
    return await get_fetcher().fetch_url(url, method=method, headers=headers, body=body, timeout=timeout)


def test_auth(url: str) -> AuthTestResult:
    """Inspect the rule for *url* with the default fetcher. See :meth:`AuthFetcher.test_auth`."""
    return get_fetcher().test_auth(url)
