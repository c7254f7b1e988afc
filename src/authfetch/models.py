"""Canonical Pydantic models shared across all authfetch modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- deserialised from the rules file by
:mod:`authfetch.config`:
    :class:`BearerAuth`, :class:`ApiKeyAuth`, :class:`BasicAuth`,
    :class:`CookieAuth`, :class:`FunctionAuth`, :class:`OAuth2Auth` (the
    :data:`AuthMethod` union), :class:`AuthRule`, :class:`GlobalSettings`,
    and :class:`AuthFetchConfig`.

**Result models** -- produced at the public API boundary:
    :class:`AuthTestResult`.

Rules and auth methods are frozen: a rule set is rebuilt from scratch on
every configuration load and never mutated in place.
"""

from __future__ import annotations

import importlib
import json
from typing import Annotated, Any, Callable, Literal, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# --- Auth methods ---


class BearerAuth(BaseModel):
    """Static bearer token sent as ``Authorization: Bearer <token>``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["bearer"] = "bearer"
    token: str


class ApiKeyAuth(BaseModel):
    """Static API key sent as a header or appended to the query string.

    The location is spelled ``in`` in configuration files, matching the
    OpenAPI vocabulary::

        {"type": "api_key", "key": "X-API-Key", "value": "abc", "in": "header"}
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["api_key"] = "api_key"
    key: str
    value: str
    location: Literal["header", "query"] = Field(alias="in")


class BasicAuth(BaseModel):
    """HTTP Basic credentials (:rfc:`7617`)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["basic"] = "basic"
    username: str
    password: str


class CookieAuth(BaseModel):
    """Cookies joined into a single ``Cookie`` header, in mapping order."""

    model_config = ConfigDict(frozen=True)

    type: Literal["cookie"] = "cookie"
    cookies: dict[str, str]


class FunctionAuth(BaseModel):
    """Credential produced at request time by a zero-argument callable.

    The callable returns either ``{"token": "..."}`` (sent as a bearer
    token) or a mapping of header names to values that is merged into the
    request headers as-is. Coroutine functions are awaited.

    In a configuration file the callable is referenced by import path::

        {"type": "function", "function": "mypkg.creds:get_headers"}

    When rules are built in Python the callable is passed directly.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["function"] = "function"
    function: Callable[[], Any]

    @field_validator("function", mode="before")
    @classmethod
    def _resolve_reference(cls, value: Any) -> Any:
        if isinstance(value, str):
            return resolve_callable(value)
        return value

    @field_serializer("function")
    def _serialize_function(self, function: Callable[[], Any]) -> str:
        module = getattr(function, "__module__", None) or "<unknown>"
        name = getattr(function, "__qualname__", None) or type(function).__qualname__
        return f"{module}:{name}"


class OAuth2Auth(BaseModel):
    """OAuth2 client-credentials or refresh-token grant.

    When ``refresh_token`` is set the token endpoint is called with
    ``grant_type=refresh_token``; otherwise ``grant_type=client_credentials``.
    Obtained tokens are cached by :class:`~authfetch.auth.token_manager.OAuth2TokenManager`.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["oauth2"] = "oauth2"
    token_url: str
    client_id: str
    client_secret: str
    scope: Optional[str] = None
    refresh_token: Optional[str] = None

    @field_validator("token_url")
    @classmethod
    def _check_token_url(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"Invalid token_url: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"token_url must be an absolute http(s) URL, got {value!r}")
        return value


AuthMethod = Annotated[
    Union[BearerAuth, ApiKeyAuth, BasicAuth, CookieAuth, FunctionAuth, OAuth2Auth],
    Field(discriminator="type"),
]
"""Closed union over the supported auth kinds, discriminated by ``type``."""


# --- Rules and settings ---


class AuthRule(BaseModel):
    """A URL-pattern-to-credential binding.

    ``url_pattern`` is matched against the request's domain (``host[:port]``)
    by :func:`~authfetch.matching.find_matching_rule`:

    * ``/regex/`` -- a pattern wrapped in slashes is a regular expression.
    * ``*.example.com`` -- any pattern containing ``*`` is a shell glob.
    * ``api.example.com`` -- anything else must equal the domain exactly.
    """

    model_config = ConfigDict(frozen=True)

    url_pattern: str = Field(min_length=1)
    auth: AuthMethod
    description: Optional[str] = None
    enabled: bool = True


class GlobalSettings(BaseModel):
    """Process-wide request defaults, read-only after load."""

    model_config = ConfigDict(frozen=True)

    default_timeout: Optional[float] = Field(
        default=None, ge=0, description="Request timeout in milliseconds"
    )
    max_retries: Optional[int] = Field(
        default=None, ge=0, description="Retries for connection-level failures"
    )
    user_agent: Optional[str] = Field(
        default=None, description="User-Agent header applied to every request"
    )
    verbose_test_auth: bool = Field(
        default=False, description="Show unmasked secrets in test_auth output"
    )


class AuthFetchConfig(BaseModel):
    """Top-level shape of the rules file."""

    auth_rules: list[AuthRule]
    global_settings: GlobalSettings = Field(default_factory=GlobalSettings)


# --- Results ---


class AuthTestResult(BaseModel):
    """Outcome of :meth:`~authfetch.client.fetcher.AuthFetcher.test_auth`."""

    rule: Optional[AuthRule] = None
    config_file: Optional[str] = Field(default=None, serialization_alias="configFile")
    error: Optional[str] = None

    def to_json(self) -> str:
        """Serialise for tool output; ``rule`` is always present, even when null."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        data.setdefault("rule", None)
        return json.dumps(data, indent=2)


# --- Helpers ---


def resolve_callable(reference: str) -> Callable[[], Any]:
    """Import a ``"package.module:attribute"`` reference and return the callable.

    Args:
        reference: Import path with a colon separating module and attribute.
            Dotted attributes (``module:Class.method``) are followed.

    Returns:
        The referenced callable.

    Raises:
        ValueError: If the reference is malformed, cannot be imported, or
            does not point to a callable. Pydantic surfaces this as a
            validation error.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(
            f"Function reference must look like 'package.module:attribute', got {reference!r}"
        )
    try:
        target: Any = importlib.import_module(module_name)
    except Exception as exc:
        raise ValueError(f"Cannot import module '{module_name}': {exc}") from exc
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as exc:
            raise ValueError(f"'{reference}' does not exist") from exc
    if not callable(target):
        raise ValueError(f"'{reference}' is not callable")
    return target
