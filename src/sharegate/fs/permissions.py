"""Permission model — capabilities, folder rules, and per-user records.

A ``PermissionTable`` is loaded once per request and never mutated by the
access checks.  Rules are matched by longest folder prefix: the lookup
walks from the requested folder toward ``root`` and the first rule found
decides.  An empty capability set is an explicit deny for that subtree.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .utils import ancestors, normalize_folder

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Capability granted by a folder rule."""

    READ = "read"
    WRITE = "write"
    READ_OWN = "read_own"
    SHARE = "share"
    MANAGE = "manage"


# Capabilities that satisfy a check, beyond the capability itself
_IMPLIED_BY: dict[Capability, frozenset[Capability]] = {
    Capability.READ: frozenset({Capability.MANAGE}),
    Capability.WRITE: frozenset({Capability.MANAGE}),
    Capability.READ_OWN: frozenset({Capability.READ, Capability.MANAGE}),
    Capability.SHARE: frozenset({Capability.MANAGE}),
    Capability.MANAGE: frozenset(),
}


def parse_capabilities(values: Iterable[str | Capability]) -> frozenset[Capability]:
    """Convert capability names to a frozenset. Raises ``ValueError`` on unknown names."""
    return frozenset(Capability(v) for v in values)


@dataclass(frozen=True)
class FolderRule:
    """Capabilities granted for a folder and everything below it."""

    folder: str
    capabilities: frozenset[Capability] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "folder", normalize_folder(self.folder))
        object.__setattr__(self, "capabilities", parse_capabilities(self.capabilities))

    def allows(self, capability: Capability) -> bool:
        if capability in self.capabilities:
            return True
        return not self.capabilities.isdisjoint(_IMPLIED_BY[capability])


@dataclass(frozen=True)
class PermissionRecord:
    """Permission settings for one user."""

    is_admin: bool = False
    folder_only: bool = False
    """Confine the user to the subtree named after their username."""

    read_only: bool = False
    """Deny every write and share regardless of folder rules."""

    rules: tuple[FolderRule, ...] = ()
    _index: Mapping[str, FolderRule] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        rules = tuple(self.rules)
        index: dict[str, FolderRule] = {}
        for rule in rules:
            if rule.folder in index:
                # first definition wins
                logger.debug("Duplicate folder rule for %r ignored", rule.folder)
                continue
            index[rule.folder] = rule
        object.__setattr__(self, "rules", rules)
        object.__setattr__(self, "_index", MappingProxyType(index))

    def match(self, folder: str) -> FolderRule | None:
        """Return the most specific rule covering *folder*, or None."""
        for candidate in ancestors(folder):
            rule = self._index.get(candidate)
            if rule is not None:
                return rule
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PermissionRecord:
        """Build a record from a JSON-style mapping.

        ``folders`` may be a mapping of folder to capability names or an
        ordered list of ``{"folder": ..., "capabilities": [...]}`` items.
        """
        folders = data.get("folders") or {}
        if isinstance(folders, Mapping):
            items = [(folder, caps) for folder, caps in folders.items()]
        else:
            items = [(item["folder"], item.get("capabilities", ())) for item in folders]

        return cls(
            is_admin=bool(data.get("isAdmin", data.get("is_admin", False))),
            folder_only=bool(data.get("folderOnly", data.get("folder_only", False))),
            read_only=bool(data.get("readOnly", data.get("read_only", False))),
            rules=tuple(FolderRule(str(folder), frozenset(caps)) for folder, caps in items),
        )


@dataclass(frozen=True)
class PermissionTable:
    """Immutable mapping of username to ``PermissionRecord``."""

    records: Mapping[str, PermissionRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", MappingProxyType(dict(self.records)))

    def get(self, username: object) -> PermissionRecord | None:
        if not isinstance(username, str) or not username:
            return None
        return self.records.get(username)

    def __contains__(self, username: object) -> bool:
        return self.get(username) is not None

    def __len__(self) -> int:
        return len(self.records)

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> PermissionTable:
        """Build a table from ``{username: record_mapping}``."""
        return cls({str(user): PermissionRecord.from_dict(rec) for user, rec in data.items()})


# =============================================================================
# Grant Flags (admin panel shape)
# =============================================================================


@dataclass(frozen=True)
class GrantFlags:
    """Per-folder checkboxes as an administrator edits them.

    ``normalized()`` applies the implications: manage grants view and
    upload, upload without any view grants view-own, share grants view.
    """

    view: bool = False
    view_own: bool = False
    upload: bool = False
    manage: bool = False
    share: bool = False

    def normalized(self) -> GrantFlags:
        view, view_own, upload = self.view, self.view_own, self.upload
        if self.manage:
            view = True
            upload = True
        if upload and not view and not view_own:
            view_own = True
        if self.share:
            view = True
        return GrantFlags(view, view_own, upload, self.manage, self.share)

    def capabilities(self) -> frozenset[Capability]:
        flags = self.normalized()
        caps: set[Capability] = set()
        if flags.manage:
            caps.add(Capability.MANAGE)
        if flags.view:
            caps.add(Capability.READ)
        if flags.view_own:
            caps.add(Capability.READ_OWN)
        if flags.upload:
            caps.add(Capability.WRITE)
        if flags.share:
            caps.add(Capability.SHARE)
        return frozenset(caps)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GrantFlags:
        return cls(
            view=bool(data.get("view", False)),
            view_own=bool(data.get("viewOwn", data.get("view_own", False))),
            upload=bool(data.get("upload", False)),
            manage=bool(data.get("manage", False)),
            share=bool(data.get("share", False)),
        )
