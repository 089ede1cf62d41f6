"""PermissionStore — load and edit the permission table in a SQL database.

Stateless service that receives the concrete models at construction and a
session at call time.  Methods flush but do not commit; the caller owns
the transaction.  The access checks never use the store directly: a
request loads a ``PermissionTable`` once and passes it around.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlmodel import select

from sharegate.models.permissions import FolderGrant, UserPermission

from .permissions import (
    Capability,
    FolderRule,
    GrantFlags,
    PermissionRecord,
    PermissionTable,
)
from .utils import normalize_folder

if TYPE_CHECKING:
    from sqlmodel import Session

    from sharegate.models.permissions import FolderGrantBase, UserPermissionBase

logger = logging.getLogger(__name__)


def _encode_capabilities(capabilities: frozenset[Capability]) -> str:
    return ",".join(sorted(c.value for c in capabilities))


def _decode_capabilities(raw: str, username: str, folder: str) -> frozenset[Capability]:
    caps: set[Capability] = set()
    for name in raw.split(","):
        name = name.strip()
        if not name:
            continue
        try:
            caps.add(Capability(name))
        except ValueError:
            logger.warning(
                "Unknown capability %r in grant for %r on %r dropped", name, username, folder
            )
    return frozenset(caps)


def _require_username(username: str) -> str:
    if not isinstance(username, str) or not username.strip():
        raise ValueError("username is required")
    return username


class PermissionStore:
    """Reads and writes users and folder grants.

    Constructor receives the concrete table models so callers can use
    custom SQLModel subclasses with different table names.
    """

    def __init__(
        self,
        user_model: type[UserPermissionBase] = UserPermission,
        grant_model: type[FolderGrantBase] = FolderGrant,
    ) -> None:
        self._user_model = user_model
        self._grant_model = grant_model

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _grants_for(self, session: Session, username: str) -> list[FolderGrantBase]:
        model = self._grant_model
        result = session.exec(
            select(model).where(model.username == username).order_by(model.position)
        )
        return list(result.all())

    def _to_record(
        self, user: UserPermissionBase, grants: list[FolderGrantBase]
    ) -> PermissionRecord:
        return PermissionRecord(
            is_admin=user.is_admin,
            folder_only=user.folder_only,
            read_only=user.read_only,
            rules=tuple(
                FolderRule(
                    g.folder,
                    _decode_capabilities(g.capabilities, user.username, g.folder),
                )
                for g in grants
            ),
        )

    def load_record(self, session: Session, username: str) -> PermissionRecord | None:
        """Load one user's record, or None if the user is unknown."""
        user = session.get(self._user_model, username)
        if user is None:
            return None
        return self._to_record(user, self._grants_for(session, username))

    def load_table(self, session: Session) -> PermissionTable:
        """Load every user's record into an immutable table."""
        users = session.exec(select(self._user_model)).all()
        model = self._grant_model
        grants = session.exec(select(model).order_by(model.username, model.position)).all()

        by_user: dict[str, list[FolderGrantBase]] = {}
        for grant in grants:
            by_user.setdefault(grant.username, []).append(grant)

        return PermissionTable(
            {u.username: self._to_record(u, by_user.get(u.username, [])) for u in users}
        )

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _ensure_user(self, session: Session, username: str) -> UserPermissionBase:
        user = session.get(self._user_model, username)
        if user is None:
            user = self._user_model(username=username)
            session.add(user)
        return user

    def save_record(self, session: Session, username: str, record: PermissionRecord) -> None:
        """Replace the user's flags and all of their grants with *record*."""
        username = _require_username(username)
        user = self._ensure_user(session, username)
        user.is_admin = record.is_admin
        user.folder_only = record.folder_only
        user.read_only = record.read_only
        user.updated_at = datetime.now(UTC)

        for grant in self._grants_for(session, username):
            session.delete(grant)
        for position, rule in enumerate(record.rules):
            session.add(
                self._grant_model(
                    username=username,
                    folder=rule.folder,
                    capabilities=_encode_capabilities(rule.capabilities),
                    position=position,
                )
            )
        session.flush()

    def apply_user_grants(
        self,
        session: Session,
        username: str,
        grants: Mapping[str, GrantFlags | Mapping[str, Any]],
    ) -> list[str]:
        """Set one user's grants on several folders at once.

        Folders present in *grants* are overwritten with the normalized
        flags; a folder with every flag off becomes an explicit deny.
        Folders left out are unchanged.  Returns the normalized folders
        that were updated.
        """
        username = _require_username(username)
        self._ensure_user(session, username)
        existing = self._grants_for(session, username)
        by_folder: dict[str, FolderGrantBase] = {}
        for grant in existing:
            by_folder.setdefault(grant.folder, grant)
        next_position = max((g.position for g in existing), default=-1) + 1

        updated: list[str] = []
        for folder, flags in grants.items():
            if not isinstance(flags, GrantFlags):
                flags = GrantFlags.from_dict(flags)
            folder = normalize_folder(folder)
            encoded = _encode_capabilities(flags.capabilities())

            grant = by_folder.get(folder)
            if grant is None:
                grant = self._grant_model(
                    username=username,
                    folder=folder,
                    capabilities=encoded,
                    position=next_position,
                )
                next_position += 1
                by_folder[folder] = grant
            else:
                grant.capabilities = encoded
            session.add(grant)
            updated.append(folder)

        session.flush()
        return updated

    def purge_user(self, session: Session, username: str) -> bool:
        """Remove a user and all their grants. Returns True if anything was removed."""
        removed = False
        for grant in self._grants_for(session, username):
            session.delete(grant)
            removed = True
        user = session.get(self._user_model, username)
        if user is not None:
            session.delete(user)
            removed = True
        session.flush()
        return removed
