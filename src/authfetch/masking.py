"""Redaction of secrets in auth rules.

Used by :meth:`~authfetch.client.fetcher.AuthFetcher.test_auth` and the
``authfetch rules`` command so that configuration can be inspected without
leaking credentials. Identifying fields (``url_pattern``, ``description``,
``client_id``, ``token_url``, header and cookie names) stay visible.
"""

from __future__ import annotations

from authfetch.models import (
    ApiKeyAuth,
    AuthRule,
    BasicAuth,
    BearerAuth,
    CookieAuth,
    OAuth2Auth,
)

MASK = "***MASKED***"


def mask_rule(rule: AuthRule) -> AuthRule:
    """Return a copy of *rule* with every secret field replaced by :data:`MASK`.

    Masked fields per auth type:

    * ``bearer`` -- ``token``
    * ``api_key`` -- ``value``
    * ``basic`` -- ``username`` and ``password``
    * ``cookie`` -- every cookie value
    * ``oauth2`` -- ``client_secret`` and, when set, ``refresh_token``

    ``function`` rules carry no stored secret and are returned unchanged.
    The operation is idempotent.

    Args:
        rule: The rule to redact. It is not modified.

    Returns:
        A new :class:`~authfetch.models.AuthRule`.
    """
    auth = rule.auth
    if isinstance(auth, BearerAuth):
        update: dict[str, object] = {"token": MASK}
    elif isinstance(auth, ApiKeyAuth):
        update = {"value": MASK}
    elif isinstance(auth, BasicAuth):
        update = {"username": MASK, "password": MASK}
    elif isinstance(auth, CookieAuth):
        update = {"cookies": {name: MASK for name in auth.cookies}}
    elif isinstance(auth, OAuth2Auth):
        update = {"client_secret": MASK}
        if auth.refresh_token is not None:
            update["refresh_token"] = MASK
    else:
        return rule
    return rule.model_copy(update={"auth": auth.model_copy(update=update)})
