"""Tests for domain extraction and rule selection."""

from __future__ import annotations

import logging

import pytest

from authfetch.matching import (
    PatternKind,
    classify_pattern,
    find_matching_rule,
    get_domain,
    pattern_matches,
)
from authfetch.models import AuthRule, BearerAuth


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_rule(pattern: str, token: str | None = None, enabled: bool = True) -> AuthRule:
    return AuthRule(
        url_pattern=pattern,
        auth=BearerAuth(token=token or f"tok-{pattern}"),
        enabled=enabled,
    )


# ---------------------------------------------------------------------------
# get_domain
# ---------------------------------------------------------------------------


class TestGetDomain:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://api.github.com/x", "api.github.com"),
            ("http://localhost:3000/y", "localhost:3000"),
            ("https://api.example.com", "api.example.com"),
            ("https://api.example.com:8443/a?b=c#d", "api.example.com:8443"),
            ("https://user:pw@api.example.com/x", "api.example.com"),
            ("http://127.0.0.1:8080/", "127.0.0.1:8080"),
            ("http://[::1]:8080/", "[::1]:8080"),
        ],
    )
    def test_well_formed(self, url: str, expected: str) -> None:
        assert get_domain(url) == expected

    def test_host_case_is_preserved(self) -> None:
        assert get_domain("https://API.Example.com/") == "API.Example.com"

    def test_default_port_is_not_elided(self) -> None:
        assert get_domain("https://api.example.com:443/") == "api.example.com:443"

    @pytest.mark.parametrize(
        "url",
        [
            "not a url",
            "",
            "api.example.com/path",
            "/relative/path",
            "https://",
            "http://host:notaport/",
            "http://bad host/",
        ],
    )
    def test_malformed_returns_empty(self, url: str) -> None:
        assert get_domain(url) == ""


# ---------------------------------------------------------------------------
# Pattern classification and single-pattern matching
# ---------------------------------------------------------------------------


class TestPatterns:
    def test_classify(self) -> None:
        assert classify_pattern("/^api\\.x\\.com$/") is PatternKind.REGEX
        assert classify_pattern("*.x.com") is PatternKind.GLOB
        assert classify_pattern("*") is PatternKind.GLOB
        assert classify_pattern("api.x.com") is PatternKind.EXACT

    def test_slash_prefix_wins_over_star(self) -> None:
        assert classify_pattern("/.*\\.x\\.com/") is PatternKind.REGEX

    def test_regex_is_searched_not_anchored(self) -> None:
        assert pattern_matches("/example/", "api.example.com")

    def test_exact_includes_port(self) -> None:
        assert pattern_matches("localhost:3000", "localhost:3000")
        assert not pattern_matches("localhost", "localhost:3000")

    def test_glob_is_case_sensitive(self) -> None:
        assert pattern_matches("*.example.com", "api.example.com")
        assert not pattern_matches("*.example.com", "API.EXAMPLE.COM")

    def test_bare_star_matches_everything(self) -> None:
        assert pattern_matches("*", "anything.at.all:1234")


# ---------------------------------------------------------------------------
# find_matching_rule
# ---------------------------------------------------------------------------


class TestFindMatchingRule:
    def setup_method(self) -> None:
        self.exact = _make_rule("api.github.com")
        self.glob = _make_rule("*.openai.com")
        self.regex = _make_rule("/^api\\.special\\.com$/")
        self.wildcard = _make_rule("*")
        self.rules = [self.exact, self.glob, self.regex, self.wildcard]

    def test_exact(self) -> None:
        assert find_matching_rule("https://api.github.com/foo", self.rules) is self.exact

    def test_glob(self) -> None:
        assert find_matching_rule("https://api.openai.com/v1", self.rules) is self.glob

    def test_regex(self) -> None:
        assert find_matching_rule("https://api.special.com", self.rules) is self.regex

    def test_wildcard_fallback(self) -> None:
        assert find_matching_rule("https://unknown.com", self.rules) is self.wildcard

    def test_no_rules(self) -> None:
        assert find_matching_rule("https://api.github.com", []) is None

    def test_malformed_url_never_matches(self) -> None:
        assert find_matching_rule("not a url", [self.wildcard]) is None

    def test_no_match(self) -> None:
        assert find_matching_rule("https://unknown.com", [self.exact, self.glob]) is None

    def test_regex_beats_exact_and_glob_in_any_order(self) -> None:
        exact = _make_rule("api.special.com")
        glob = _make_rule("*.special.com")
        regex = _make_rule("/special/")
        for rules in (
            [exact, glob, regex],
            [glob, regex, exact],
            [regex, exact, glob],
            [exact, regex, glob],
        ):
            assert find_matching_rule("https://api.special.com/x", rules) is regex

    def test_exact_beats_glob(self) -> None:
        glob = _make_rule("*.github.com")
        assert find_matching_rule("https://api.github.com", [glob, self.exact]) is self.exact

    def test_longer_pattern_wins_within_tier(self) -> None:
        broad = _make_rule("*.com")
        narrow = _make_rule("*.example.com")
        assert find_matching_rule("https://api.example.com", [broad, narrow]) is narrow

    def test_ties_keep_declaration_order(self) -> None:
        first = _make_rule("*.a.com", token="first")
        second = _make_rule("*.a.com", token="second")
        assert find_matching_rule("https://x.a.com", [first, second]) is first
        assert find_matching_rule("https://x.a.com", [second, first]) is second

    def test_disabled_rules_never_match(self) -> None:
        disabled = _make_rule("*", enabled=False)
        assert find_matching_rule("https://anything.com", [disabled]) is None

    def test_disabled_rule_falls_through_to_next(self) -> None:
        disabled = _make_rule("api.github.com", enabled=False)
        assert find_matching_rule("https://api.github.com", [disabled, self.wildcard]) is self.wildcard

    def test_invalid_regex_is_skipped_and_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        broken = _make_rule("/api[/")
        with caplog.at_level(logging.WARNING, logger="authfetch.matching"):
            result = find_matching_rule("https://api.github.com", [broken, self.exact])
        assert result is self.exact
        assert "Invalid regex" in caplog.text

    def test_port_must_match_exactly(self) -> None:
        local = _make_rule("localhost:3000")
        assert find_matching_rule("http://localhost:3000/y", [local]) is local
        assert find_matching_rule("http://localhost:4000/y", [local]) is None
