"""Domain extraction and rule selection.

A request URL is reduced to its domain (``host[:port]``) and matched against
the enabled rules. Rules are tried in a fixed precedence order:

1. **Regex** patterns (``/^api\\.example\\.com$/``) -- the most deliberate
   authoring choice.
2. **Exact** patterns (``api.example.com``, ``localhost:3000``).
3. **Glob** patterns (``*.example.com``, ``*``).

Within a tier, longer patterns are tried first so that a specific rule is
never shadowed by a shorter, broader one. The first pattern that matches
wins; having no match at all is a normal outcome, not an error.
"""

from __future__ import annotations

import enum
import fnmatch
import logging
import re
from typing import Optional, Sequence
from urllib.parse import urlsplit

from authfetch.models import AuthRule

logger = logging.getLogger(__name__)


class PatternKind(str, enum.Enum):
    """Pattern tiers in precedence order."""

    REGEX = "regex"
    EXACT = "exact"
    GLOB = "glob"


_TIER_RANK = {PatternKind.REGEX: 0, PatternKind.EXACT: 1, PatternKind.GLOB: 2}


def get_domain(url: str) -> str:
    """Return the authority (``host[:port]``) of an absolute URL.

    The authority is returned exactly as written (no case folding, no
    default-port elision); any ``user:password@`` prefix is dropped.

    Args:
        url: The URL to inspect.

    Returns:
        The domain, or ``""`` if *url* is not a well-formed absolute URL.
        Callers treat ``""`` as "no match possible".

    Example::

        >>> get_domain("http://localhost:3000/y")
        'localhost:3000'
        >>> get_domain("not a url")
        ''
    """
    try:
        parts = urlsplit(url)
        # Accessing .port validates it (raises ValueError if non-numeric).
        parts.port
    except ValueError:
        return ""
    if not parts.scheme or not parts.netloc:
        return ""
    domain = parts.netloc.rpartition("@")[2]
    if not domain or any(ch.isspace() for ch in domain):
        return ""
    return domain


def classify_pattern(pattern: str) -> PatternKind:
    """Classify a rule pattern into its precedence tier."""
    if pattern.startswith("/"):
        return PatternKind.REGEX
    if "*" in pattern:
        return PatternKind.GLOB
    return PatternKind.EXACT


def pattern_matches(pattern: str, domain: str) -> bool:
    """Test a single pattern against a domain.

    Raises:
        re.error: If a regex pattern does not compile.
    """
    kind = classify_pattern(pattern)
    if kind is PatternKind.REGEX:
        return re.search(pattern[1:-1], domain) is not None
    if kind is PatternKind.GLOB:
        return fnmatch.fnmatchcase(domain, pattern)
    return pattern == domain


def _precedence(rule: AuthRule) -> tuple[int, int]:
    return _TIER_RANK[classify_pattern(rule.url_pattern)], -len(rule.url_pattern)


def find_matching_rule(url: str, rules: Sequence[AuthRule]) -> Optional[AuthRule]:
    """Select the single rule that applies to *url*.

    Args:
        url: Absolute request URL.
        rules: Candidate rules in declaration order. Disabled rules are
            ignored.

    Returns:
        The highest-precedence matching rule, or ``None``.
    """
    domain = get_domain(url)
    if not domain:
        return None

    candidates = sorted((r for r in rules if r.enabled), key=_precedence)
    for rule in candidates:
        try:
            if pattern_matches(rule.url_pattern, domain):
                logger.debug("Rule '%s' matched domain %s", rule.url_pattern, domain)
                return rule
        except re.error as exc:
            logger.warning("Invalid regex in rule %s: %s", rule.url_pattern, exc)

    return None
