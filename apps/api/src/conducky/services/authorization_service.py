"""Scope-hierarchical authorization.

``authorize`` walks the scope chain from most to least senior and allows at
the first scope where the user holds a qualifying role:

* a role named in ``roles``, or
* a role whose level is at least the threshold. For level checks the threshold
  is ``min_level`` and applies at every scope. For named checks it is the
  highest level among the named roles and applies only at scopes senior to
  the target, so a system_admin passes an event_admin gate while an
  org_viewer does not.

Seniority only flows downward: an organization's chain never contains its
events, so event grants cannot satisfy organization gates.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from conducky.domain.enums import SYSTEM_SCOPE_ID, AuditAction, RoleName, ScopeType
from conducky.domain.scopes import Scope
from conducky.services.audit_service import log_audit, scope_columns
from conducky.services.role_assignment_service import list_for_scopes
from conducky.services.role_catalog import RoleInfo, role_catalog
from conducky.services.scope_resolver import resolve_scope_chain

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: str | None = None
    scope: Scope | None = None
    role: str | None = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls, scope: Scope, role: str) -> Decision:
        return cls(allowed=True, scope=scope, role=role)

    @classmethod
    def deny(cls, reason: str) -> Decision:
        return cls(allowed=False, reason=reason)


def _threshold(db: Session, roles: frozenset[str] | None, min_level: int | None) -> int:
    if min_level is not None:
        return min_level
    return max(role_catalog.get_role_by_name(db, name).level for name in roles)


def evaluate(
    db: Session,
    chain: list[Scope],
    held: dict[Scope, list[RoleInfo]],
    *,
    roles: frozenset[str] | None = None,
    min_level: int | None = None,
) -> Decision:
    threshold = _threshold(db, roles, min_level)
    target = chain[-1]
    for scope in chain:
        for role in held.get(scope, ()):
            if roles is not None and role.name in roles:
                return Decision.allow(scope, role.name)
            if role.level >= threshold and (min_level is not None or scope != target):
                return Decision.allow(scope, role.name)
    return Decision.deny("no qualifying role in scope chain")


def authorize(
    db: Session,
    user_id: uuid.UUID,
    scope_type: ScopeType | str,
    scope_id: str | uuid.UUID,
    *,
    roles: Iterable[str] | None = None,
    min_level: int | None = None,
) -> Decision:
    """Decide whether a user may act at a scope.

    Raises ScopeNotFound when the scope entity does not exist. Denial is
    returned, never raised.
    """
    if (roles is None) == (min_level is None):
        raise ValueError("pass exactly one of roles or min_level")
    role_set = frozenset(roles) if roles is not None else None
    if role_set is not None and not role_set:
        raise ValueError("roles must not be empty")

    chain = resolve_scope_chain(db, scope_type, scope_id)

    held: dict[Scope, list[RoleInfo]] = defaultdict(list)
    for assignment in list_for_scopes(db, user_id, chain):
        scope = Scope.of(assignment.scope_type, assignment.scope_id)
        held[scope].append(role_catalog.get_role_by_id(db, assignment.role_id))

    decision = evaluate(db, chain, held, roles=role_set, min_level=min_level)
    if not decision:
        logger.info("authorization denied user=%s target=%s", user_id, chain[-1])
    return decision


def is_system_admin(db: Session, user_id: uuid.UUID) -> bool:
    return authorize(
        db, user_id, ScopeType.system, SYSTEM_SCOPE_ID, roles=[RoleName.system_admin]
    ).allowed


def record_denial(db: Session, user_id: uuid.UUID, scope: Scope) -> None:
    """Persist an access_denied audit entry. Carries no role requirements."""
    log_audit(
        db,
        action=AuditAction.access_denied,
        target_type=scope.type.capitalize(),
        target_id=scope.id,
        user_id=user_id,
        **scope_columns(scope),
    )
    db.commit()
