"""Result types: ResolveResult, FolderEntry, ListResult, EntriesResult."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class Operation(str, Enum):
    """Filesystem operation a caller wants to perform."""

    READ = "read"
    WRITE = "write"
    LIST = "list"
    DESCEND = "descend"


@dataclass
class ResolveResult:
    """Verdict for one operation, with the canonical path on success."""

    success: bool
    message: str
    folder: str | None = None
    real_path: Path | None = None
    read_own_only: bool = False
    """True when access was granted through a ``read_own`` rule only."""


@dataclass
class FolderEntry:
    """A child folder row in a listing."""

    name: str
    path: str
    locked: bool = False
    has_subfolders: bool | None = None


@dataclass
class ListResult:
    """Result of a folder listing."""

    success: bool
    message: str
    folder: str | None = None
    entries: list[FolderEntry] = field(default_factory=list)
    next_cursor: str | None = None


@dataclass
class EntriesResult:
    """Visible entry names of a folder (files and folders)."""

    success: bool
    message: str
    folder: str | None = None
    names: list[str] = field(default_factory=list)
