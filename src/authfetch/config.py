"""Rules file discovery, environment substitution, and parsing.

The rules file is looked up on every load, so edits take effect on the next
request without a restart:

1. ``$AUTHFETCH_CONFIG`` -- an explicit path (must exist).
2. ``./.mcp-auth-fetch.{json,yaml,yml}`` in the current working directory.
3. ``~/.mcp-auth-fetch.{json,yaml,yml}`` in the home directory.

Before parsing, every ``${VAR}`` in the file is replaced with the value of
the environment variable ``VAR`` so that secrets can be kept out of the
file itself. A referenced variable that is not set is a
:class:`~authfetch.exceptions.ConfigError`.

Files are parsed as JSON or YAML. A missing file is not an error: it yields
a configuration with no rules.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from authfetch.exceptions import ConfigError
from authfetch.models import AuthFetchConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AUTHFETCH_CONFIG"
CONFIG_FILENAMES = (".mcp-auth-fetch.json", ".mcp-auth-fetch.yaml", ".mcp-auth-fetch.yml")

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


# --- Discovery ---


def find_config_file() -> Optional[Path]:
    """Locate the rules file.

    Returns:
        The path of the first rules file found, or ``None``.

    Raises:
        ConfigError: If ``$AUTHFETCH_CONFIG`` names a file that does not exist.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path} (from ${CONFIG_ENV_VAR})")
        return path

    for search_dir in (Path.cwd(), Path.home()):
        for name in CONFIG_FILENAMES:
            candidate = search_dir / name
            if candidate.is_file():
                return candidate
    return None


# --- Substitution ---


def substitute_env_vars(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Replace every ``${VAR}`` in *text* with its environment value.

    Args:
        text: Raw file content.
        environ: Variables to substitute from. Defaults to ``os.environ``.

    Returns:
        The substituted text.

    Raises:
        ConfigError: If a referenced variable is not set.
    """
    env = os.environ if environ is None else environ

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        value = env.get(name)
        if value is None:
            raise ConfigError(f"Missing required environment variable: {name}")
        return value

    return _ENV_VAR_PATTERN.sub(_replace, text)


# --- Parsing ---


def _parse_mapping(content: str, hint: str) -> dict[str, Any]:
    """Parse *content* as JSON (unless hinted YAML), falling back to YAML."""
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise ConfigError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise ConfigError(
                    f"Config must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse config as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise ConfigError(msg) from exc

    if not isinstance(result, dict):
        raise ConfigError(
            "Config must be a JSON/YAML object (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def parse_config(content: str, hint: str = "") -> AuthFetchConfig:
    """Parse and validate rules file content (already substituted).

    Args:
        content: JSON or YAML text.
        hint: ``"json"``, ``"yaml"``, or ``""`` to auto-detect.

    Returns:
        The validated :class:`~authfetch.models.AuthFetchConfig`.

    Raises:
        ConfigError: If the content is not a mapping or fails validation.
    """
    data = _parse_mapping(content, hint)
    try:
        return AuthFetchConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_config(path: Optional[Path] = None) -> AuthFetchConfig:
    """Load the active rules file.

    Args:
        path: Explicit file to load. When ``None``, :func:`find_config_file`
            decides; if no file exists an empty configuration is returned.

    Returns:
        A freshly built :class:`~authfetch.models.AuthFetchConfig`.

    Raises:
        ConfigError: If the file cannot be read, references an unset
            environment variable, or is invalid.
    """
    if path is None:
        path = find_config_file()
    if path is None:
        logger.debug("No config file found, continuing without auth rules")
        return AuthFetchConfig(auth_rules=[])

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error reading config file %s: %s", path, exc)
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    suffix = path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    try:
        config = parse_config(substitute_env_vars(content), hint=hint)
    except ConfigError as exc:
        logger.error("Error loading or parsing config file %s: %s", path, exc)
        raise

    logger.debug("Loaded %d auth rules from %s", len(config.auth_rules), path)
    return config
