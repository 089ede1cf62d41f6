"""sharegate: permission-aware filesystem access for multi-user file sharing.

Upload, download, listing and WebDAV handlers run these checks before
touching disk.
"""

__version__ = "0.1.0"

from sharegate.config import GateConfig
from sharegate.fs import (
    AccessDeniedError,
    AccessGate,
    Capability,
    FolderRule,
    GrantFlags,
    IgnoreRuleSet,
    Operation,
    PermissionRecord,
    PermissionStore,
    PermissionTable,
    can_read,
    can_read_own,
    can_write,
    has_readable_descendant,
    is_admin,
    is_safe_segment,
    resolve_within_root,
    should_ignore_entry,
)

__all__ = [
    "AccessDeniedError",
    "AccessGate",
    "Capability",
    "FolderRule",
    "GateConfig",
    "GrantFlags",
    "IgnoreRuleSet",
    "Operation",
    "PermissionRecord",
    "PermissionStore",
    "PermissionTable",
    "__version__",
    "can_read",
    "can_read_own",
    "can_write",
    "has_readable_descendant",
    "is_admin",
    "is_safe_segment",
    "resolve_within_root",
    "should_ignore_entry",
]
