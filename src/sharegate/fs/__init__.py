"""Access layer — path safety, permission rules, and the composed gate."""

from sharegate.fs.access import (
    can_manage,
    can_read,
    can_read_own,
    can_share,
    can_write,
    has_readable_descendant,
    is_admin,
)
from sharegate.fs.exceptions import AccessDeniedError, ConfigurationError, ShareGateError
from sharegate.fs.gate import AccessGate
from sharegate.fs.ignore import IgnoreRuleSet, default_ignore_rules
from sharegate.fs.path_safety import (
    IGNORED_NAMES,
    RESERVED_NAMES,
    is_safe_segment,
    resolve_relative,
    resolve_within_root,
    should_ignore_entry,
)
from sharegate.fs.permissions import (
    Capability,
    FolderRule,
    GrantFlags,
    PermissionRecord,
    PermissionTable,
)
from sharegate.fs.store import PermissionStore
from sharegate.fs.types import EntriesResult, FolderEntry, ListResult, Operation, ResolveResult

__all__ = [
    "IGNORED_NAMES",
    "RESERVED_NAMES",
    "AccessDeniedError",
    "AccessGate",
    "Capability",
    "ConfigurationError",
    "EntriesResult",
    "FolderEntry",
    "FolderRule",
    "GrantFlags",
    "IgnoreRuleSet",
    "ListResult",
    "Operation",
    "PermissionRecord",
    "PermissionStore",
    "PermissionTable",
    "ResolveResult",
    "ShareGateError",
    "can_manage",
    "can_read",
    "can_read_own",
    "can_share",
    "can_write",
    "default_ignore_rules",
    "has_readable_descendant",
    "is_admin",
    "is_safe_segment",
    "resolve_relative",
    "resolve_within_root",
    "should_ignore_entry",
]
