"""Typer application and CLI entry point for authfetch.

Commands:

* ``authfetch fetch URL`` -- fetch a URL with the matching rule's credential.
* ``authfetch test-auth URL`` -- show which rule applies to a URL.
* ``authfetch rules`` -- list the configured rules (secrets never shown).
* ``authfetch serve`` -- run the MCP server over stdio or streamable HTTP.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the Typer app, and
turns :class:`~authfetch.exceptions.AuthFetchError` into its exit code.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from authfetch import __version__
from authfetch.exceptions import AuthFetchError, ConfigError, InvalidUsageError
from authfetch.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="authfetch",
    help="Fetch URLs with credentials chosen by URL-matching rules.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"authfetch {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=verbose)
        ],
        force=True,
    )
    # httpx logs every request at INFO; keep it quiet unless debugging.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~authfetch.output.OutputManager` and
    configures logging (rendered on stderr through rich).
    """
    from authfetch.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    _setup_logging(verbose)


def _fail(exc: AuthFetchError) -> typer.Exit:
    """Report *exc* on stderr and return the matching :class:`typer.Exit`."""
    from authfetch.output import error

    error(str(exc))
    return typer.Exit(code=exc.exit_code)


def _parse_headers(values: Optional[List[str]]) -> dict[str, str]:
    """Parse repeated ``-H "Name: value"`` options.

    Raises:
        InvalidUsageError: If a value has no colon or an empty name.
    """
    headers: dict[str, str] = {}
    for raw in values or []:
        name, sep, value = raw.partition(":")
        name = name.strip()
        if not sep or not name:
            raise InvalidUsageError(f"Invalid header '{raw}'. Expected 'Name: value'.")
        headers[name] = value.strip()
    return headers


@app.command("fetch")
def fetch_command(
    url: str = typer.Argument(..., help="URL to fetch."),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    header: Optional[List[str]] = typer.Option(
        None, "--header", "-H", help="Extra header as 'Name: value' (repeatable)."
    ),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Request body."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Timeout in milliseconds (default: config or 30000)."
    ),
) -> None:
    """Fetch URL, applying the credential of the matching auth rule."""
    from authfetch.client.fetcher import get_fetcher
    from authfetch.output import debug, print_data

    try:
        headers = _parse_headers(header)
    except InvalidUsageError as exc:
        raise _fail(exc) from None

    debug(f"{method.upper()} {url}")
    result = asyncio.run(
        get_fetcher().fetch_url(
            url, method=method.upper(), headers=headers, body=data, timeout=timeout
        )
    )
    print_data(result)


@app.command("test-auth")
def test_auth_command(
    url: str = typer.Argument(..., help="URL to check."),
) -> None:
    """Show which auth rule would be used for URL."""
    from authfetch.client.fetcher import get_fetcher
    from authfetch.output import print_json

    print_json(get_fetcher().test_auth(url).to_json())


@app.command("rules")
def rules_command() -> None:
    """List the configured auth rules in declaration order. Secrets are never shown."""
    from authfetch.config import find_config_file, load_config
    from authfetch.matching import classify_pattern
    from authfetch.output import info, print_table

    try:
        path = find_config_file()
        config = load_config(path)
    except ConfigError as exc:
        raise _fail(exc) from None

    if path is None:
        info("No config file found.")
    else:
        info(f"Config file: {path}")

    rows = [
        [
            rule.url_pattern,
            classify_pattern(rule.url_pattern).value,
            rule.auth.type,
            "yes" if rule.enabled else "no",
            rule.description or "",
        ]
        for rule in config.auth_rules
    ]
    print_table(["Pattern", "Kind", "Auth", "Enabled", "Description"], rows, title="Auth rules")


@app.command("serve")
def serve_command(
    transport: str = typer.Option(
        "stdio", "--transport", "-t", help="MCP transport: 'stdio' or 'http'."
    ),
    host: Optional[str] = typer.Option(None, "--host", help="HTTP bind address (default: $HOST)."),
    port: Optional[int] = typer.Option(
        None, "--port", help="HTTP port (default: $PORT or 8080)."
    ),
) -> None:
    """Run the MCP server exposing the fetch_url and test_auth tools."""
    from authfetch.server import DEFAULT_PORT, run_server

    if transport not in ("stdio", "http"):
        raise _fail(
            InvalidUsageError(f"Unknown transport '{transport}'. Use 'stdio' or 'http'.")
        )

    if host is None:
        host = os.environ.get("HOST") or "127.0.0.1"
    if port is None:
        env_port = os.environ.get("PORT")
        try:
            port = int(env_port) if env_port else DEFAULT_PORT
        except ValueError:
            raise _fail(
                InvalidUsageError(f"Invalid PORT environment variable: {env_port!r}")
            ) from None

    run_server(transport=transport, host=host, port=port)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``authfetch`` console script.

    Unhandled :class:`~authfetch.exceptions.AuthFetchError` instances cause
    a clean exit with the error's ``exit_code``. All other exceptions are
    reported and produce a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from authfetch.output import error

        if isinstance(exc, AuthFetchError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
