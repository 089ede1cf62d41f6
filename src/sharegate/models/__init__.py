"""SQLModel database models for sharegate."""

from sharegate.models.permissions import (
    FolderGrant,
    FolderGrantBase,
    UserPermission,
    UserPermissionBase,
)

__all__ = [
    "FolderGrant",
    "FolderGrantBase",
    "UserPermission",
    "UserPermissionBase",
]
