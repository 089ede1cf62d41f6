"""Path safety — segment validation, root containment, and entry filtering.

Every function here is total for untrusted input: a rejection is reported
as ``False`` or ``None``, never as an exception.  Callers must treat
``None`` as "not found" and must not continue with a partially resolved
path.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

from .ignore import default_ignore_rules
from .utils import ROOT, join_relative, normalize_folder, split_folder

if TYPE_CHECKING:
    from .ignore import IgnoreRuleSet

# Hidden/system artifacts never shown (NAS thumbnails, recycle bins, OS metadata)
IGNORED_NAMES = frozenset({"@eaDir", "#recycle", ".DS_Store", "Thumbs.db"})

# Application-owned folders skipped in listings and probes (compared lowercased)
RESERVED_NAMES = frozenset({"trash", "profile_pics"})

MAX_SEGMENT_LENGTH = 255

_CONTROL_CHARS = re.compile(r"[\x00-\x1f]")


# =============================================================================
# Segment Validation
# =============================================================================


def is_safe_segment(name: str) -> bool:
    """Check that *name* is a single, plain path segment.

    Rejects empty names, ``.``/``..``, ``/`` or ``\\`` separators, control
    characters (including NUL), and names longer than 255 characters.
    Length is counted in characters, not encoded bytes.
    """
    if not name or name in (".", ".."):
        return False
    if "/" in name or "\\" in name:
        return False
    if _CONTROL_CHARS.search(name):
        return False
    return len(name) <= MAX_SEGMENT_LENGTH


def is_hidden_name(name: str) -> bool:
    """Dot-prefixed names are never listed."""
    return name.startswith(".")


def is_reserved_name(name: str) -> bool:
    """Check the application-reserved skip-list (case-insensitive)."""
    return name.lower() in RESERVED_NAMES


# =============================================================================
# Root Containment
# =============================================================================


def resolve_within_root(
    root_real: str | os.PathLike[str],
    candidate: str | os.PathLike[str],
) -> Path | None:
    """Canonicalize *candidate* and return it only if it stays inside *root_real*.

    Symlinks and ``..`` are resolved by the OS, so a link whose target lies
    outside the root is rejected even though its own name looked safe.
    Relative candidates are taken relative to the root.  Returns None for
    missing paths, OS errors, ``..`` segments, and anything that escapes.

    Raises ``ValueError`` only when *root_real* itself is empty.
    """
    root_str = os.fspath(root_real)
    if not root_str:
        raise ValueError("root_real must be a non-empty path")

    try:
        candidate_str = os.fspath(candidate)
    except TypeError:
        return None
    if not candidate_str or "\x00" in candidate_str:
        return None
    if ".." in re.split(r"[\\/]", candidate_str):
        return None

    try:
        root = Path(root_str).resolve()
        target = Path(candidate_str)
        if not target.is_absolute():
            target = root / target
        resolved = target.resolve(strict=True)
    except (OSError, RuntimeError, ValueError):
        return None

    base = str(root).rstrip(os.sep) + os.sep
    if not (str(resolved).rstrip(os.sep) + os.sep).startswith(base):
        return None
    return resolved


def resolve_relative(root_real: str | os.PathLike[str], rel_path: str) -> Path | None:
    """Resolve a ``root``-based relative path after validating each segment."""
    parts = split_folder(rel_path)
    if not all(is_safe_segment(part) for part in parts):
        return None
    return resolve_within_root(root_real, Path(os.fspath(root_real)).joinpath(*parts))


# =============================================================================
# Entry Filtering
# =============================================================================


def should_ignore_entry(
    name: str,
    parent_rel: str = "",
    rules: IgnoreRuleSet | None = None,
) -> bool:
    """Check whether a directory entry is hidden by the fixed list or ignore rules.

    Patterns are tried against the bare *name* and against the joined
    ``parent_rel/name`` path (just *name* when *parent_rel* is ``root``).
    *rules* defaults to the process-wide set built from the environment.
    """
    if not name:
        return False
    if name in IGNORED_NAMES:
        return True

    if rules is None:
        rules = default_ignore_rules()
    if not rules:
        return False

    parent = normalize_folder(parent_rel)
    path = name if parent == ROOT else join_relative(parent, name)
    return rules.matches(name, path)


def is_listable_name(
    name: str,
    parent_rel: str = "",
    rules: IgnoreRuleSet | None = None,
) -> bool:
    """Apply the full listing filter: hidden, ignored, unsafe, and reserved names fail."""
    if is_hidden_name(name):
        return False
    if should_ignore_entry(name, parent_rel, rules):
        return False
    if not is_safe_segment(name):
        return False
    return not is_reserved_name(name)
