"""IgnoreRuleSet — operator-configured regex rules that hide directory entries.

The raw configuration is a multi-line string, one pattern per line.  Each
line is either a fully delimited pattern (``/^tmp/i``, ``#\\.bak$#``) or a
bare pattern that gets wrapped in ``~`` delimiters.  Patterns that fail to
compile are logged and dropped; the remaining ones still apply.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_ENV_VAR = "SHAREGATE_IGNORE_REGEX"
"""Environment variable read by :func:`default_ignore_rules`."""

WRAP_DELIMITER = "~"
PATTERN_MODIFIERS = "imsxuADU"

_MODIFIER_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    # str patterns are unicode-aware already; D has no re counterpart
    "u": 0,
    "D": 0,
}

_LINE_SPLIT = re.compile(r"\r?\n")


# =============================================================================
# Pattern Normalization
# =============================================================================


def normalize_ignore_pattern(raw: str) -> str | None:
    r"""
    Normalize one configuration line into a delimited pattern.

    Returns None for blank lines.

    Examples:
        normalize_ignore_pattern("/^tmp/i") -> "/^tmp/i"
        normalize_ignore_pattern("^\.") -> "~^\.~"
        normalize_ignore_pattern("a~b") -> "~a\~b~"
    """
    raw = raw.strip()
    if not raw:
        return None

    delimiter = raw[0]
    if not delimiter.isalnum() and delimiter != "\\":
        quoted = re.escape(delimiter)
        if re.fullmatch(f"{quoted}.+{quoted}[{PATTERN_MODIFIERS}]*", raw, re.DOTALL):
            return raw

    body = raw.replace(WRAP_DELIMITER, "\\" + WRAP_DELIMITER)
    return f"{WRAP_DELIMITER}{body}{WRAP_DELIMITER}"


def _closing_delimiter(pattern: str, delimiter: str) -> int:
    """Index of the first unescaped *delimiter* after the opening one, or -1."""
    i = 1
    while i < len(pattern):
        if pattern[i] == "\\":
            i += 2
            continue
        if pattern[i] == delimiter:
            return i
        i += 1
    return -1


def compile_ignore_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a delimited pattern produced by :func:`normalize_ignore_pattern`.

    The body ends at the first unescaped delimiter; anything after it is
    read as modifiers.

    Raises ``ValueError`` for malformed delimiters or unsupported modifiers
    and ``re.error`` for an invalid body.
    """
    if len(pattern) < 3:
        raise ValueError(f"Pattern too short: {pattern!r}")

    delimiter = pattern[0]
    end = _closing_delimiter(pattern, delimiter)
    if end < 0:
        raise ValueError(f"Missing closing delimiter: {pattern!r}")

    body = pattern[1:end]
    flags = 0
    anchored = False
    for modifier in pattern[end + 1 :]:
        if modifier == "A":
            anchored = True
        elif modifier in _MODIFIER_FLAGS:
            flags |= _MODIFIER_FLAGS[modifier]
        else:
            raise ValueError(f"Unsupported pattern modifier {modifier!r}")

    if anchored:
        body = rf"\A(?:{body})"
    return re.compile(body, flags)


# =============================================================================
# Rule Set
# =============================================================================


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Immutable list of compiled ignore patterns.

    Build one with :meth:`from_config` and pass it to
    ``should_ignore_entry`` / ``AccessGate``.  Safe to share across threads.
    """

    patterns: tuple[re.Pattern[str], ...] = ()

    @classmethod
    def from_config(cls, raw: str | None) -> IgnoreRuleSet:
        """Compile every non-blank line of *raw*, dropping invalid patterns."""
        raw = (raw or "").strip()
        if not raw:
            return cls()

        compiled: list[re.Pattern[str]] = []
        for line in _LINE_SPLIT.split(raw):
            pattern = normalize_ignore_pattern(line)
            if pattern is None:
                continue
            try:
                compiled.append(compile_ignore_pattern(pattern))
            except (re.error, ValueError) as e:
                logger.warning("Dropping invalid ignore pattern %r: %s", line.strip(), e)
        return cls(tuple(compiled))

    @classmethod
    def from_env(cls, env_var: str = DEFAULT_ENV_VAR) -> IgnoreRuleSet:
        return cls.from_config(os.environ.get(env_var, ""))

    def __len__(self) -> int:
        return len(self.patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def matches(self, name: str, path: str | None = None) -> bool:
        """True if any pattern matches *name* or, when given, the joined *path*."""
        for rx in self.patterns:
            if rx.search(name):
                return True
            if path is not None and path != name and rx.search(path):
                return True
        return False


# =============================================================================
# Process Default
# =============================================================================

_default_rules: IgnoreRuleSet | None = None
_default_lock = threading.Lock()


def default_ignore_rules() -> IgnoreRuleSet:
    """Return the process-wide rule set, building it from the environment once."""
    global _default_rules
    rules = _default_rules
    if rules is None:
        with _default_lock:
            if _default_rules is None:
                _default_rules = IgnoreRuleSet.from_env()
            rules = _default_rules
    return rules


def reset_default_ignore_rules() -> None:
    """Forget the cached default so the next call re-reads the environment."""
    global _default_rules
    with _default_lock:
        _default_rules = None
