"""Permission storage models — user flags and per-folder grants.

Provides ``UserPermissionBase`` / ``FolderGrantBase`` (non-table) and the
concrete ``UserPermission`` / ``FolderGrant`` tables.  Subclass a base with
``table=True`` and a custom ``__tablename__`` to use different table names.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class UserPermissionBase(SQLModel):
    """Account-level flags for one user. Subclass with ``table=True`` for a concrete table."""

    username: str = Field(primary_key=True)
    is_admin: bool = Field(default=False)
    folder_only: bool = Field(default=False)
    read_only: bool = Field(default=False)
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class FolderGrantBase(SQLModel):
    """One folder rule for one user.

    ``capabilities`` is a comma-separated list of capability names; an
    empty string is an explicit deny.  ``position`` keeps definition order.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    username: str = Field(index=True)
    folder: str = Field(default="root", index=True)
    capabilities: str = Field(default="")
    position: int = Field(default=0)


class UserPermission(UserPermissionBase, table=True):
    """Default user table — ``sharegate_users``."""

    __tablename__ = "sharegate_users"


class FolderGrant(FolderGrantBase, table=True):
    """Default grant table — ``sharegate_folder_grants``."""

    __tablename__ = "sharegate_folder_grants"
