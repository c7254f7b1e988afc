"""authfetch -- rule-based authentication for outbound HTTP requests.

Given a set of URL-matching rules, authfetch picks the authentication
method that applies to a request, injects the credential (header, query
parameter, cookie, or an OAuth2 bearer token it obtains and caches), and
dispatches the call.

Typical usage::

    import asyncio
    import authfetch

    body = asyncio.run(authfetch.fetch_url("https://api.github.com/user"))
    print(authfetch.test_auth("https://api.github.com/user").to_json())

Rules are read from ``.mcp-auth-fetch.json`` (or ``.yaml``) in the current
directory or the home directory, or from the file named by
``AUTHFETCH_CONFIG``.

Modules:
    app: Typer CLI entry point.
    server: MCP server exposing ``fetch_url`` and ``test_auth`` tools.
    models: Pydantic models for rules, auth methods, and settings.
    config: Config file discovery, ``${VAR}`` substitution, and parsing.
    matching: Domain extraction and rule selection.
    masking: Redaction of secrets in rules.
    exceptions: Exception hierarchy with exit-code mapping.
"""

__version__ = "0.3.0"

from authfetch.client.fetcher import fetch_url, test_auth  # noqa: E402

__all__ = ["__version__", "fetch_url", "test_auth"]
