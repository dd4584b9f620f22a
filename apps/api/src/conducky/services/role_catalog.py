"""Role catalog.

Roles are seeded once and change only at bootstrap or migration time, so the
catalog is kept in process as an immutable snapshot. Readers never take a lock;
``invalidate()`` drops the snapshot and the next reader rebuilds it.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from sqlalchemy.orm import Session

from conducky.core.errors import RoleNotFound
from conducky.db.models.role import Role
from conducky.domain.enums import RoleName, ScopeType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RoleInfo:
    id: uuid.UUID
    name: str
    scope: ScopeType
    level: int
    description: str | None = None


@dataclass(frozen=True, slots=True)
class _Snapshot:
    by_name: Mapping[str, RoleInfo]
    by_id: Mapping[uuid.UUID, RoleInfo]


DEFAULT_ROLES: list[tuple[RoleName, ScopeType, int, str]] = [
    (RoleName.system_admin, ScopeType.system, 100, "System administrator with global access"),
    (RoleName.org_admin, ScopeType.organization, 50, "Organization administrator"),
    (RoleName.event_admin, ScopeType.event, 40, "Event administrator"),
    (RoleName.responder, ScopeType.event, 20, "Incident responder"),
    (RoleName.org_viewer, ScopeType.organization, 10, "Organization viewer"),
    (RoleName.reporter, ScopeType.event, 5, "Incident reporter"),
]

ROLE_LEVELS: dict[str, int] = {name: level for name, _scope, level, _desc in DEFAULT_ROLES}


class RoleCatalog:
    def __init__(self) -> None:
        self._snapshot: _Snapshot | None = None
        self._lock = threading.Lock()

    def _load(self, db: Session) -> _Snapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                infos = [
                    RoleInfo(
                        id=r.id,
                        name=r.name,
                        scope=ScopeType(r.scope),
                        level=r.level,
                        description=r.description,
                    )
                    for r in db.query(Role).all()
                ]
                snapshot = _Snapshot(
                    by_name=MappingProxyType({i.name: i for i in infos}),
                    by_id=MappingProxyType({i.id: i for i in infos}),
                )
                if not infos:
                    # Nothing seeded yet; do not pin an empty catalog.
                    return snapshot
                logger.debug("role catalog loaded with %d role(s)", len(infos))
                self._snapshot = snapshot
            return self._snapshot

    def get_role_by_name(self, db: Session, name: str) -> RoleInfo:
        role = self._load(db).by_name.get(name)
        if role is None:
            raise RoleNotFound()
        return role

    def get_role_by_id(self, db: Session, role_id: uuid.UUID) -> RoleInfo:
        role = self._load(db).by_id.get(role_id)
        if role is None:
            raise RoleNotFound()
        return role

    def list_roles(self, db: Session) -> list[RoleInfo]:
        return sorted(self._load(db).by_name.values(), key=lambda r: (-r.level, r.name))

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None


role_catalog = RoleCatalog()


def get_role_by_name(db: Session, name: str) -> RoleInfo:
    return role_catalog.get_role_by_name(db, name)


def get_role_by_id(db: Session, role_id: uuid.UUID) -> RoleInfo:
    return role_catalog.get_role_by_id(db, role_id)


def list_roles(db: Session) -> list[RoleInfo]:
    return role_catalog.list_roles(db)


def seed_roles(db: Session) -> int:
    """Insert or refresh the default roles, then drop the cached catalog.

    Returns the number of roles created.
    """
    created = 0
    for name, scope, level, description in DEFAULT_ROLES:
        role = db.query(Role).filter(Role.name == name).first()
        if role is None:
            db.add(Role(name=name, scope=scope, level=level, description=description))
            created += 1
        else:
            role.scope = scope
            role.level = level
            role.description = description
    db.commit()
    role_catalog.invalidate()
    logger.info("seed_roles: %d created, %d total", created, len(DEFAULT_ROLES))
    return created
