"""Shared test fixtures for authfetch.

Provides isolated config environments, reset of process-wide state
(output manager, default fetcher), and a CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from authfetch.client.fetcher import reset_fetcher
from authfetch.config import CONFIG_ENV_VAR
from authfetch.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests() -> None:
    """Reset the global OutputManager and default fetcher after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  The default fetcher owns the
    OAuth2 token cache, which must not leak between tests.
    """
    yield
    reset_output()
    reset_fetcher()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate rules file discovery to a temporary directory.

    Points HOME at an empty ``home`` subdirectory, changes the working
    directory to ``tmp_path``, and clears ``$AUTHFETCH_CONFIG`` so that
    tests never pick up a real user's rules file.

    Returns:
        The tmp_path root directory (the working directory) for writing
        rules files.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_config(isolated_config: Path):
    """Return a helper that writes a rules file into the working directory.

    Usage::

        path = write_config({"auth_rules": [...]})
    """

    def _write(data: dict[str, Any], name: str = ".mcp-auth-fetch.json") -> Path:
        path = isolated_config / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager as the global output."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
