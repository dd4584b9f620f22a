"""Role assignment store.

Functions here flush but never commit; the calling service owns the transaction.
Every grant and revoke writes an audit entry in the same transaction.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import and_, func, or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, joinedload, lazyload

from conducky.core.errors import AssignmentNotFound, UserNotFound, ValidationError
from conducky.db.models.user import User
from conducky.db.models.user_role import UserRole
from conducky.domain.enums import AuditAction, ScopeType
from conducky.domain.scopes import Scope
from conducky.services.audit_service import log_audit, scope_columns
from conducky.services.role_catalog import RoleInfo, role_catalog

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


def _scope_filter(scope: Scope):
    return and_(UserRole.scope_type == scope.type, UserRole.scope_id == scope.id)


def _find(db: Session, user_id: uuid.UUID, role_id: uuid.UUID, scope: Scope) -> UserRole | None:
    return (
        db.query(UserRole)
        .populate_existing()
        .filter(UserRole.user_id == user_id, UserRole.role_id == role_id, _scope_filter(scope))
        .first()
    )


def require_role_for_scope(db: Session, role_name: str, scope_type: ScopeType | str) -> RoleInfo:
    """Catalog lookup that also rejects roles designed for another scope type."""
    role = role_catalog.get_role_by_name(db, role_name)
    if role.scope != ScopeType(scope_type):
        raise ValidationError(f"Role cannot be granted at {ScopeType(scope_type)} scope")
    return role


def grant(
    db: Session,
    user_id: uuid.UUID,
    role_name: str,
    scope_type: ScopeType | str,
    scope_id: str | uuid.UUID,
    granted_by_id: uuid.UUID | None = None,
) -> UserRole:
    """Grant a role, or refresh granted_at/granted_by_id if already held."""
    role = role_catalog.get_role_by_name(db, role_name)
    db.flush()
    if db.get(User, user_id) is None:
        raise UserNotFound()

    scope = Scope.of(scope_type, scope_id)
    now = datetime.now(UTC)
    insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)

    if insert is not None:
        stmt = insert(UserRole).values(
            id=uuid.uuid4(),
            user_id=user_id,
            role_id=role.id,
            scope_type=scope.type,
            scope_id=scope.id,
            granted_at=now,
            granted_by_id=granted_by_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "role_id", "scope_type", "scope_id"],
            set_={
                "granted_at": stmt.excluded.granted_at,
                "granted_by_id": stmt.excluded.granted_by_id,
                "updated_at": func.now(),
            },
        )
        db.execute(stmt)
        assignment = _find(db, user_id, role.id, scope)
    else:
        assignment = _find(db, user_id, role.id, scope)
        if assignment is None:
            assignment = UserRole(
                user_id=user_id, role_id=role.id, scope_type=scope.type, scope_id=scope.id
            )
            db.add(assignment)
        assignment.granted_at = now
        assignment.granted_by_id = granted_by_id
        db.flush()

    log_audit(
        db,
        action=AuditAction.role_granted,
        target_type="User",
        target_id=user_id,
        user_id=granted_by_id,
        detail={"role": role.name, "scope_type": scope.type, "scope_id": scope.id},
        **scope_columns(scope),
    )
    logger.info("granted %s to user=%s at %s", role.name, user_id, scope)
    return assignment


def revoke(
    db: Session,
    user_id: uuid.UUID,
    role_name: str,
    scope_type: ScopeType | str,
    scope_id: str | uuid.UUID,
    revoked_by_id: uuid.UUID | None = None,
) -> None:
    """Delete an assignment. Revoking one that does not exist is AssignmentNotFound."""
    role = role_catalog.get_role_by_name(db, role_name)
    scope = Scope.of(scope_type, scope_id)
    assignment = _find(db, user_id, role.id, scope)
    if assignment is None:
        raise AssignmentNotFound()

    db.delete(assignment)
    db.flush()
    log_audit(
        db,
        action=AuditAction.role_revoked,
        target_type="User",
        target_id=user_id,
        user_id=revoked_by_id,
        detail={"role": role.name, "scope_type": scope.type, "scope_id": scope.id},
        **scope_columns(scope),
    )
    logger.info("revoked %s from user=%s at %s", role.name, user_id, scope)


def list_for_user(
    db: Session,
    user_id: uuid.UUID,
    scope_type: ScopeType | str | None = None,
    scope_id: str | uuid.UUID | None = None,
) -> list[UserRole]:
    query = db.query(UserRole).filter(UserRole.user_id == user_id)
    if scope_type is not None:
        query = query.filter(UserRole.scope_type == ScopeType(scope_type))
    if scope_id is not None:
        query = query.filter(UserRole.scope_id == str(scope_id))
    return query.order_by(UserRole.granted_at).all()


def list_for_scopes(db: Session, user_id: uuid.UUID, scopes: Iterable[Scope]) -> list[UserRole]:
    """A user's assignments at any of the given scopes, without loading roles."""
    clauses = [_scope_filter(s) for s in scopes]
    if not clauses:
        return []
    return (
        db.query(UserRole)
        .options(lazyload(UserRole.role))
        .filter(UserRole.user_id == user_id, or_(*clauses))
        .all()
    )


def list_for_scope(
    db: Session, scope_type: ScopeType | str, scope_id: str | uuid.UUID
) -> list[UserRole]:
    scope = Scope.of(scope_type, scope_id)
    return (
        db.query(UserRole)
        .options(joinedload(UserRole.user))
        .filter(_scope_filter(scope))
        .order_by(UserRole.granted_at)
        .all()
    )


def users_with_roles(
    db: Session, scope_type: ScopeType | str, scope_id: str | uuid.UUID
) -> list[dict]:
    """Display projection of list_for_scope: one entry per user with role names."""
    users: dict[uuid.UUID, dict] = {}
    for assignment in list_for_scope(db, scope_type, scope_id):
        entry = users.setdefault(
            assignment.user_id,
            {
                "id": str(assignment.user.id),
                "email": assignment.user.email,
                "name": assignment.user.name,
                "roles": [],
            },
        )
        entry["roles"].append(assignment.role.name)
    return list(users.values())


def roles_by_scope(db: Session, user_id: uuid.UUID) -> dict:
    grouped: dict = {"system": [], "organizations": {}, "events": {}}
    for assignment in list_for_user(db, user_id):
        name = assignment.role.name
        if assignment.scope_type == ScopeType.system:
            grouped["system"].append(name)
        elif assignment.scope_type == ScopeType.organization:
            grouped["organizations"].setdefault(assignment.scope_id, []).append(name)
        else:
            grouped["events"].setdefault(assignment.scope_id, []).append(name)
    return grouped


def revoke_all_in_scope(
    db: Session,
    user_id: uuid.UUID,
    scope_type: ScopeType | str,
    scope_id: str | uuid.UUID,
    revoked_by_id: uuid.UUID | None = None,
) -> list[str]:
    """Remove a user from an event or organization. Returns the revoked role names."""
    assignments = list_for_user(db, user_id, scope_type, scope_id)
    if not assignments:
        raise AssignmentNotFound("User has no roles in this scope")
    names = [a.role.name for a in assignments]
    for name in names:
        revoke(db, user_id, name, scope_type, scope_id, revoked_by_id=revoked_by_id)
    return names


def delete_scope_assignments(
    db: Session, scope_type: ScopeType | str, scope_id: str | uuid.UUID
) -> int:
    """Cascade helper for scope entity deletion."""
    scope = Scope.of(scope_type, scope_id)
    deleted = (
        db.query(UserRole)
        .filter(_scope_filter(scope))
        .delete(synchronize_session="fetch")
    )
    db.flush()
    logger.info("deleted %d assignment(s) at %s", deleted, scope)
    return deleted
