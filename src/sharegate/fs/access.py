"""Access control — authorization checks over a ``PermissionTable``.

All checks are total: they return a bool for any input and default to the
most restrictive answer for unknown users.  Admins short-circuit to True
before any other rule is consulted.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from .path_safety import is_listable_name, is_safe_segment, resolve_within_root
from .permissions import Capability, PermissionRecord
from .utils import join_relative, normalize_folder, split_folder

if TYPE_CHECKING:
    from .ignore import IgnoreRuleSet
    from .permissions import PermissionTable

logger = logging.getLogger(__name__)

DEFAULT_PROBE_DEPTH = 2


# =============================================================================
# Rule Evaluation
# =============================================================================


def _in_own_folder(username: str, folder: str) -> bool:
    parts = split_folder(folder)
    return bool(parts) and parts[0] == username


def _evaluate(
    username: str,
    table: PermissionTable,
    folder: str,
    capability: Capability,
) -> bool:
    try:
        record = table.get(username)
    except (AttributeError, TypeError):
        return False
    if not isinstance(record, PermissionRecord):
        return False
    if record.is_admin:
        return True
    if not isinstance(folder, str):
        return False

    folder = normalize_folder(folder)
    if not all(is_safe_segment(part) for part in split_folder(folder)):
        return False
    if record.folder_only and not _in_own_folder(username, folder):
        return False
    if record.read_only and capability in (Capability.WRITE, Capability.SHARE):
        return False

    rule = record.match(folder)
    return rule is not None and rule.allows(capability)


def is_admin(username: str, table: PermissionTable) -> bool:
    """True only for a known user whose record has ``is_admin`` set."""
    try:
        record = table.get(username)
    except (AttributeError, TypeError):
        return False
    return isinstance(record, PermissionRecord) and record.is_admin


def can_read(username: str, table: PermissionTable, folder: str) -> bool:
    """Full view of *folder*: a ``read`` or ``manage`` rule."""
    return _evaluate(username, table, folder, Capability.READ)


def can_read_own(username: str, table: PermissionTable, folder: str) -> bool:
    """Own-files-only view: full view or a ``read_own`` rule."""
    return _evaluate(username, table, folder, Capability.READ_OWN)


def can_write(username: str, table: PermissionTable, folder: str) -> bool:
    """Upload/modify in *folder*. Always False for read-only users."""
    return _evaluate(username, table, folder, Capability.WRITE)


def can_share(username: str, table: PermissionTable, folder: str) -> bool:
    """Create share links for *folder*. Always False for read-only users."""
    return _evaluate(username, table, folder, Capability.SHARE)


def can_manage(username: str, table: PermissionTable, folder: str) -> bool:
    """Owner-level control of *folder*."""
    return _evaluate(username, table, folder, Capability.MANAGE)


# =============================================================================
# Reachability Probe
# =============================================================================


def has_readable_descendant(
    root_real: str | os.PathLike[str],
    abs_path: str | os.PathLike[str],
    rel_path: str,
    username: str,
    table: PermissionTable,
    max_depth: int = DEFAULT_PROBE_DEPTH,
    rules: IgnoreRuleSet | None = None,
) -> bool:
    """Check whether a folder the user cannot open has any readable descendant.

    Used to decide if a locked folder should still be rendered as a
    navigable row.  The search is depth-first, stops at the first readable
    child, and never looks more than *max_depth* levels below *abs_path*,
    so a deeply nested readable folder can be missed.

    Children are skipped when hidden, ignored, unsafe, reserved, not a
    directory, or a symlink that resolves outside *root_real*.
    """
    if max_depth <= 0:
        return False

    directory = Path(abs_path)
    try:
        with os.scandir(directory) as it:
            names = sorted(entry.name for entry in it)
    except OSError:
        logger.debug("Cannot list %s during reachability probe", rel_path)
        return False

    parent_rel = normalize_folder(rel_path)
    for name in names:
        if not is_listable_name(name, parent_rel, rules):
            continue

        child = directory / name
        try:
            if not child.is_dir():
                continue
            if child.is_symlink():
                safe = resolve_within_root(root_real, child)
                if safe is None or not safe.is_dir():
                    continue
                child = safe
        except OSError:
            continue

        child_rel = join_relative(parent_rel, name)
        if can_read(username, table, child_rel) or can_read_own(username, table, child_rel):
            return True
        if max_depth > 1 and has_readable_descendant(
            root_real, child, child_rel, username, table, max_depth - 1, rules
        ):
            return True
    return False
