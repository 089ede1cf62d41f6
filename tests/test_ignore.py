"""Tests for IgnoreRuleSet — pattern normalization, compilation, and caching."""

from __future__ import annotations

import logging
import re

import pytest

from sharegate.fs.ignore import (
    DEFAULT_ENV_VAR,
    IgnoreRuleSet,
    compile_ignore_pattern,
    default_ignore_rules,
    normalize_ignore_pattern,
    reset_default_ignore_rules,
)

# ---------------------------------------------------------------------------
# normalize_ignore_pattern
# ---------------------------------------------------------------------------


class TestNormalizePattern:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            pytest.param("/^tmp/i", "/^tmp/i", id="slash-delimited-with-flag"),
            pytest.param("#\\.bak$#", "#\\.bak$#", id="hash-delimited"),
            pytest.param("^\\.", "~^\\.~", id="bare-caret"),
            pytest.param("cache", "~cache~", id="bare-word"),
            pytest.param("a~b", "~a\\~b~", id="escapes-wrap-delimiter"),
            pytest.param("  /x/  ", "/x/", id="trimmed"),
            pytest.param("/abc/z", "~/abc/z~", id="unknown-flag-not-delimited"),
            pytest.param("\\d+", "~\\d+~", id="backslash-never-delimiter"),
        ],
    )
    def test_normalize(self, raw: str, expected: str):
        assert normalize_ignore_pattern(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "\t"])
    def test_blank_is_none(self, raw: str):
        assert normalize_ignore_pattern(raw) is None


# ---------------------------------------------------------------------------
# compile_ignore_pattern
# ---------------------------------------------------------------------------


class TestCompilePattern:
    def test_case_insensitive_flag(self):
        rx = compile_ignore_pattern("/^tmp/i")
        assert rx.search("TMPFILE")

    def test_wrapped_delimiter_is_literal(self):
        rx = compile_ignore_pattern(normalize_ignore_pattern("a~b"))
        assert rx.search("xa~by")
        assert not rx.search("ab")

    def test_anchored_flag(self):
        rx = compile_ignore_pattern("/tmp/A")
        assert rx.search("tmpfile")
        assert not rx.search("my-tmp")

    def test_unsupported_modifier(self):
        with pytest.raises(ValueError, match="Unsupported"):
            compile_ignore_pattern("/a+/U")

    def test_invalid_body(self):
        with pytest.raises(re.error):
            compile_ignore_pattern("~([a-~")

    def test_body_ends_at_first_unescaped_delimiter(self):
        with pytest.raises(ValueError, match="Unsupported"):
            compile_ignore_pattern("/a/b/")

    def test_escaped_delimiter_stays_in_body(self):
        rx = compile_ignore_pattern("/a\\/b/")
        assert rx.search("a/b")


# ---------------------------------------------------------------------------
# IgnoreRuleSet
# ---------------------------------------------------------------------------


class TestIgnoreRuleSet:
    def test_empty_config(self):
        rules = IgnoreRuleSet.from_config("")
        assert len(rules) == 0
        assert not rules

    def test_none_config(self):
        assert not IgnoreRuleSet.from_config(None)

    def test_multi_line_with_crlf_and_blanks(self):
        rules = IgnoreRuleSet.from_config("^\\.\r\n\n/\\.tmp$/i\n")
        assert len(rules) == 2
        assert rules.matches(".secret")
        assert rules.matches("FILE.TMP")
        assert not rules.matches("notes.txt")

    def test_unescaped_inner_delimiter_dropped(self):
        rules = IgnoreRuleSet.from_config("/a/b/\n^cache$")
        assert len(rules) == 1
        assert not rules.matches("a/b")

    def test_invalid_pattern_dropped_others_kept(self, caplog):
        with caplog.at_level(logging.WARNING, logger="sharegate.fs.ignore"):
            rules = IgnoreRuleSet.from_config("([unclosed\n^cache$")
        assert len(rules) == 1
        assert rules.matches("cache")
        assert "Dropping invalid ignore pattern" in caplog.text

    def test_matches_joined_path(self):
        rules = IgnoreRuleSet.from_config("^build/")
        assert not rules.matches("out")
        assert rules.matches("out", "build/out")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv(DEFAULT_ENV_VAR, "^skip")
        assert IgnoreRuleSet.from_env().matches("skipme")


class TestDefaultRules:
    def test_built_once(self, monkeypatch):
        monkeypatch.setenv(DEFAULT_ENV_VAR, "^first")
        first = default_ignore_rules()
        monkeypatch.setenv(DEFAULT_ENV_VAR, "^second")
        assert default_ignore_rules() is first
        assert first.matches("first-entry")

    def test_reset_rereads_environment(self, monkeypatch):
        monkeypatch.setenv(DEFAULT_ENV_VAR, "^first")
        default_ignore_rules()
        reset_default_ignore_rules()
        monkeypatch.setenv(DEFAULT_ENV_VAR, "^second")
        assert default_ignore_rules().matches("second-entry")
