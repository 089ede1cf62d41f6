"""AccessGate — composed authorization and path resolution for controllers.

Upload, download, listing and WebDAV handlers call the gate with the
authenticated username and the request's ``PermissionTable``.  The gate
answers with a verdict and, on success, a canonical real path that is
guaranteed to lie inside the caller's scope root.  Denials and missing
paths produce the same generic message.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from .access import (
    DEFAULT_PROBE_DEPTH,
    can_read,
    can_read_own,
    can_write,
    has_readable_descendant,
)
from .exceptions import AccessDeniedError
from .ignore import default_ignore_rules
from .path_safety import is_listable_name, is_safe_segment, resolve_within_root
from .types import EntriesResult, FolderEntry, ListResult, Operation, ResolveResult
from .utils import join_relative, natural_key, normalize_folder, split_folder

if TYPE_CHECKING:
    from .ignore import IgnoreRuleSet
    from .permissions import PermissionTable

logger = logging.getLogger(__name__)

DENIED_MESSAGE = "Not found or access denied"


def _sort_key(name: str) -> tuple[list[int | str], str]:
    """Natural order, then the exact name so distinct names never compare equal."""
    return natural_key(name), name


class AccessGate:
    """Authorize and resolve relative paths under one upload root.

    Non-admin ``folder_only`` users are scoped to ``upload_root/<username>``:
    every path resolved for them must stay inside that subtree, whatever
    their folder rules say.
    """

    def __init__(
        self,
        upload_root: Path | str,
        *,
        ignore_rules: IgnoreRuleSet | None = None,
        probe_depth: int = DEFAULT_PROBE_DEPTH,
    ) -> None:
        self.upload_root = Path(upload_root).resolve()
        self.probe_depth = probe_depth
        self._ignore_rules = ignore_rules

        if not self.upload_root.exists():
            raise FileNotFoundError(f"Upload root does not exist: {self.upload_root}")
        if not self.upload_root.is_dir():
            raise NotADirectoryError(f"Upload root is not a directory: {self.upload_root}")

    @property
    def ignore_rules(self) -> IgnoreRuleSet:
        """The configured rule set, or the process default when none was given."""
        if self._ignore_rules is None:
            return default_ignore_rules()
        return self._ignore_rules

    # =========================================================================
    # Scope & Resolution
    # =========================================================================

    def scope_root(self, username: str, table: PermissionTable) -> Path | None:
        """Return the root this user's paths must stay within, or None."""
        record = table.get(username)
        if record is None:
            return None
        if record.is_admin or not record.folder_only:
            return self.upload_root
        if not is_safe_segment(username):
            return None
        return resolve_within_root(self.upload_root, self.upload_root / username)

    def _authorize(
        self,
        username: str,
        table: PermissionTable,
        folder: str,
        operation: Operation,
    ) -> tuple[bool, bool]:
        """Return ``(allowed, read_own_only)``."""
        if operation is Operation.WRITE:
            return can_write(username, table, folder), False
        if can_read(username, table, folder):
            return True, False
        if can_read_own(username, table, folder):
            return True, True
        return False, False

    def _denied(self, username: str, folder: str | None, reason: str) -> ResolveResult:
        logger.debug("Denied %r on %r: %s", username, folder, reason)
        return ResolveResult(success=False, message=DENIED_MESSAGE, folder=folder)

    def resolve(
        self,
        username: str,
        table: PermissionTable,
        rel_path: str,
        operation: Operation | str = Operation.READ,
    ) -> ResolveResult:
        """Authorize *operation* on *rel_path* and resolve its real path.

        Writes may target a name that does not exist yet: the parent is
        resolved and the validated final segment appended.  An existing
        write target is resolved again so a symlink cannot redirect it.
        """
        try:
            operation = Operation(operation)
        except ValueError:
            return self._denied(username, None, f"unknown operation {operation!r}")
        if not isinstance(rel_path, str):
            return self._denied(username, None, "non-string path")

        folder = normalize_folder(rel_path)
        parts = split_folder(folder)
        if not all(is_safe_segment(part) for part in parts):
            return self._denied(username, folder, "unsafe segment")

        allowed, own_only = self._authorize(username, table, folder, operation)
        if not allowed:
            return self._denied(username, folder, f"no {operation.value} permission")

        scope = self.scope_root(username, table)
        if scope is None:
            return self._denied(username, folder, "no scope root")

        target = self.upload_root.joinpath(*parts)
        if operation is Operation.WRITE and parts and not os.path.lexists(target):
            parent = resolve_within_root(scope, target.parent)
            if parent is None or not parent.is_dir():
                return self._denied(username, folder, "parent outside scope or missing")
            real = parent / parts[-1]
        else:
            real = resolve_within_root(scope, target)
            if real is None:
                return self._denied(username, folder, "outside scope or missing")

        return ResolveResult(
            success=True,
            message="OK",
            folder=folder,
            real_path=real,
            read_own_only=own_only,
        )

    def require(
        self,
        username: str,
        table: PermissionTable,
        rel_path: str,
        operation: Operation | str = Operation.READ,
    ) -> Path:
        """Like :meth:`resolve`, but raise ``AccessDeniedError`` on denial."""
        result = self.resolve(username, table, rel_path, operation)
        if not result.success or result.real_path is None:
            raise AccessDeniedError(result.message)
        return result.real_path

    # =========================================================================
    # Listings
    # =========================================================================

    def _child_dir(self, scope: Path, directory: Path, name: str) -> Path | None:
        """Return the real path of a child directory, or None if it is not a safe dir."""
        child = directory / name
        try:
            if not child.is_dir():
                return None
            if child.is_symlink():
                safe = resolve_within_root(scope, child)
                if safe is None or not safe.is_dir():
                    return None
                return safe
        except OSError:
            return None
        return child

    def _has_subfolders(self, scope: Path, directory: Path, rel: str) -> bool:
        rules = self.ignore_rules
        try:
            with os.scandir(directory) as it:
                names = [entry.name for entry in it]
        except OSError:
            return False
        for name in names:
            if not is_listable_name(name, rel, rules):
                continue
            if self._child_dir(scope, directory, name) is not None:
                return True
        return False

    def list_folders(
        self,
        username: str,
        table: PermissionTable,
        rel_path: str = "root",
        *,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> ListResult:
        """List child folders, including locked rows that lead to readable content.

        A child the user cannot read is shown with ``locked=True`` only when
        ``has_readable_descendant`` finds something readable below it.
        Rows are in natural, case-insensitive order; pass the returned
        ``next_cursor`` back as *cursor* to fetch the following page.
        """
        resolved = self.resolve(username, table, rel_path, Operation.LIST)
        if not resolved.success or resolved.real_path is None:
            return ListResult(success=False, message=resolved.message, folder=resolved.folder)
        if not resolved.real_path.is_dir():
            return ListResult(success=False, message=DENIED_MESSAGE, folder=resolved.folder)

        folder = resolved.folder or "root"
        directory = resolved.real_path
        scope = self.scope_root(username, table)
        if scope is None:
            return ListResult(success=False, message=DENIED_MESSAGE, folder=folder)
        rules = self.ignore_rules

        try:
            with os.scandir(directory) as it:
                names = [entry.name for entry in it]
        except OSError:
            return ListResult(success=False, message=DENIED_MESSAGE, folder=folder)

        rows: list[FolderEntry] = []
        for name in names:
            if not is_listable_name(name, folder, rules):
                continue
            child = self._child_dir(scope, directory, name)
            if child is None:
                continue

            child_rel = join_relative(folder, name)
            visible = can_read(username, table, child_rel) or can_read_own(
                username, table, child_rel
            )
            if not visible and not has_readable_descendant(
                scope, child, child_rel, username, table, self.probe_depth, rules
            ):
                continue
            rows.append(
                FolderEntry(
                    name=name,
                    path=child_rel,
                    locked=not visible,
                    has_subfolders=self._has_subfolders(scope, child, child_rel),
                )
            )

        rows.sort(key=lambda row: _sort_key(row.name))

        start = 0
        if cursor is not None:
            cursor_key = _sort_key(cursor)
            start = next(
                (i for i, row in enumerate(rows) if _sort_key(row.name) > cursor_key),
                len(rows),
            )
        end = len(rows) if limit is None else start + max(0, limit)
        page = rows[start:end]
        next_cursor = page[-1].name if page and end < len(rows) else None

        return ListResult(
            success=True,
            message=f"{len(page)} folder(s)",
            folder=folder,
            entries=page,
            next_cursor=next_cursor,
        )

    def list_entries(
        self,
        username: str,
        table: PermissionTable,
        rel_path: str = "root",
    ) -> EntriesResult:
        """Visible names (files and folders) of a readable folder."""
        resolved = self.resolve(username, table, rel_path, Operation.LIST)
        if not resolved.success or resolved.real_path is None:
            return EntriesResult(success=False, message=resolved.message, folder=resolved.folder)

        folder = resolved.folder or "root"
        directory = resolved.real_path
        scope = self.scope_root(username, table)
        if scope is None:
            return EntriesResult(success=False, message=DENIED_MESSAGE, folder=folder)
        rules = self.ignore_rules

        try:
            with os.scandir(directory) as it:
                entries = [(entry.name, entry.is_symlink()) for entry in it]
        except OSError:
            return EntriesResult(success=False, message=DENIED_MESSAGE, folder=folder)

        names = []
        for name, is_link in entries:
            if not is_listable_name(name, folder, rules):
                continue
            if is_link and resolve_within_root(scope, directory / name) is None:
                continue
            names.append(name)

        names.sort(key=_sort_key)
        return EntriesResult(
            success=True,
            message=f"{len(names)} entr{'y' if len(names) == 1 else 'ies'}",
            folder=folder,
            names=names,
        )
