"""MCP server exposing authfetch as two tools.

* ``fetch_url`` -- fetch a URL with automatic authentication. The result
  (response body or error message) is returned JSON-encoded as a string.
* ``test_auth`` -- report the auth rule that applies to a URL, as JSON.

Both tools delegate to an :class:`~authfetch.client.fetcher.AuthFetcher`,
so they never raise: failures come back as tool output.

Run with ``authfetch serve`` (stdio) or ``authfetch serve --transport http``
(streamable HTTP on ``$HOST``/``$PORT``, default port 8080).
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from authfetch import __version__
from authfetch.client.fetcher import AuthFetcher, get_fetcher

logger = logging.getLogger(__name__)

SERVER_NAME = "authfetch"
DEFAULT_PORT = 8080


async def run_fetch_url(
    fetcher: AuthFetcher,
    url: str,
    method: str = "GET",
    headers: Optional[dict[str, str]] = None,
    body: Optional[str] = None,
    timeout: Optional[float] = None,
) -> str:
    """Body of the ``fetch_url`` tool."""
    result = await fetcher.fetch_url(url, method=method, headers=headers, body=body, timeout=timeout)
    return json.dumps(result)


def run_test_auth(fetcher: AuthFetcher, url: str) -> str:
    """Body of the ``test_auth`` tool."""
    return fetcher.test_auth(url).to_json()


def create_server(
    fetcher: Optional[AuthFetcher] = None,
    host: str = "127.0.0.1",
    port: int = DEFAULT_PORT,
) -> FastMCP:
    """Build the MCP server.

    Args:
        fetcher: Fetcher backing the tools. Defaults to the process-wide
            one from :func:`~authfetch.client.fetcher.get_fetcher`, resolved
            on each call.
        host: Bind address for the streamable HTTP transport.
        port: Port for the streamable HTTP transport.

    Returns:
        A :class:`~mcp.server.fastmcp.FastMCP` instance with the
        ``fetch_url`` and ``test_auth`` tools registered.
    """
    server = FastMCP(SERVER_NAME, host=host, port=port)

    def _fetcher() -> AuthFetcher:
        return fetcher if fetcher is not None else get_fetcher()

    @server.tool(
        name="fetch_url",
        description="Fetches the content of a URL with automatic authentication.",
    )
    async def fetch_url(
        url: str,
        method: str = "GET",
        headers: Optional[dict[str, str]] = None,
        body: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> str:
        return await run_fetch_url(_fetcher(), url, method, headers, body, timeout)

    @server.tool(
        name="test_auth",
        description="Tests the authentication configuration for a given url.",
    )
    def test_auth(url: str) -> str:
        return run_test_auth(_fetcher(), url)

    return server


def run_server(transport: str = "stdio", host: str = "127.0.0.1", port: int = DEFAULT_PORT) -> None:
    """Start the MCP server and block until it exits.

    Args:
        transport: ``"stdio"`` or ``"http"`` (streamable HTTP).
        host: Bind address for ``"http"``.
        port: Port for ``"http"``.
    """
    server = create_server(host=host, port=port)
    if transport == "http":
        logger.info("authfetch %s MCP server listening on %s:%s", __version__, host, port)
        server.run(transport="streamable-http")
    else:
        logger.info("authfetch %s MCP server running on stdio", __version__)
        server.run(transport="stdio")
