"""
Shared helpers for relative folder paths.

Relative paths are ``/``-joined segments with the logical value ``"root"``
standing for the top of the upload tree.  These helpers only manipulate
strings; they never touch the filesystem.
"""

from __future__ import annotations

import re

ROOT = "root"

# =============================================================================
# Relative Path Utilities
# =============================================================================


def normalize_folder(folder: str) -> str:
    """
    Normalize a relative folder path.

    - Converts backslashes to /
    - Strips surrounding slashes and whitespace
    - Collapses empty segments
    - Maps "" and "root" to "root"

    Examples:
        normalize_folder("") -> "root"
        normalize_folder("/reports/") -> "reports"
        normalize_folder("reports\\drafts") -> "reports/drafts"
        normalize_folder("a//b") -> "a/b"
    """
    folder = folder.replace("\\", "/").strip("/ \t\r\n")
    if not folder or folder == ROOT:
        return ROOT
    return "/".join(part for part in folder.split("/") if part)


def split_folder(folder: str) -> list[str]:
    """
    Split a relative folder into its segments.

    Examples:
        split_folder("root") -> []
        split_folder("reports/drafts") -> ["reports", "drafts"]
    """
    folder = normalize_folder(folder)
    if folder == ROOT:
        return []
    return folder.split("/")


def join_relative(parent: str, name: str) -> str:
    """
    Join a child name onto a relative folder.

    Examples:
        join_relative("root", "a") -> "a"
        join_relative("a/b", "c") -> "a/b/c"
    """
    parent = normalize_folder(parent)
    if parent == ROOT:
        return name
    return f"{parent}/{name}"


def ancestors(folder: str) -> list[str]:
    """Return *folder* and each of its ancestors, most specific first, ending at "root"."""
    parts = split_folder(folder)
    chain = ["/".join(parts[:i]) for i in range(len(parts), 0, -1)]
    chain.append(ROOT)
    return chain


_DIGITS = re.compile(r"(\d+)")


def natural_key(name: str) -> list[int | str]:
    """Case-insensitive natural sort key ("file2" sorts before "file10")."""
    return [int(part) if part.isdigit() else part.lower() for part in _DIGITS.split(name)]
