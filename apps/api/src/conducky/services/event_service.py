from __future__ import annotations

import logging
import uuid

from sqlalchemy.orm import Session

from conducky.core.errors import ConflictError
from conducky.db.models.event import Event
from conducky.domain.enums import AuditAction, RoleName, ScopeType
from conducky.services import role_assignment_service as assignments
from conducky.services.audit_service import log_audit
from conducky.services.organization_service import validate_slug

logger = logging.getLogger(__name__)


def create_event(
    db: Session,
    *,
    name: str,
    slug: str,
    created_by_id: uuid.UUID,
    description: str | None = None,
    organization_id: uuid.UUID | None = None,
) -> Event:
    """Create an event and make its creator event_admin."""
    validate_slug(slug)
    if db.query(Event).filter(Event.slug == slug).first() is not None:
        raise ConflictError("Event slug already exists")

    event = Event(
        name=name,
        slug=slug,
        description=description,
        organization_id=organization_id,
    )
    db.add(event)
    db.flush()

    assignments.grant(db, created_by_id, RoleName.event_admin, ScopeType.event, event.id, created_by_id)
    log_audit(
        db,
        action=AuditAction.event_created,
        target_type="Event",
        target_id=event.id,
        user_id=created_by_id,
        event_id=event.id,
        organization_id=organization_id,
    )
    db.commit()
    db.refresh(event)
    logger.info("event %s created by user=%s", event.id, created_by_id)
    return event


def delete_event(db: Session, event: Event, *, deleted_by_id: uuid.UUID) -> None:
    event_id, org_id = event.id, event.organization_id
    assignments.delete_scope_assignments(db, ScopeType.event, event_id)
    db.delete(event)
    log_audit(
        db,
        action=AuditAction.event_deleted,
        target_type="Event",
        target_id=event_id,
        user_id=deleted_by_id,
        event_id=event_id,
        organization_id=org_id,
    )
    db.commit()


def list_event_users(db: Session, event: Event) -> list[dict]:
    return assignments.users_with_roles(db, ScopeType.event, event.id)


def user_event_roles(db: Session, event: Event, user_id: uuid.UUID) -> list[str]:
    """Role names the user holds directly at this event."""
    return [a.role.name for a in assignments.list_for_user(db, user_id, ScopeType.event, event.id)]


def assign_role(
    db: Session,
    event: Event,
    *,
    user_id: uuid.UUID,
    role_name: str,
    granted_by_id: uuid.UUID,
) -> None:
    assignments.require_role_for_scope(db, role_name, ScopeType.event)
    assignments.grant(db, user_id, role_name, ScopeType.event, event.id, granted_by_id)
    db.commit()


def revoke_role(
    db: Session,
    event: Event,
    *,
    user_id: uuid.UUID,
    role_name: str,
    revoked_by_id: uuid.UUID,
) -> None:
    assignments.revoke(db, user_id, role_name, ScopeType.event, event.id, revoked_by_id=revoked_by_id)
    db.commit()


def remove_user(
    db: Session, event: Event, *, user_id: uuid.UUID, removed_by_id: uuid.UUID
) -> list[str]:
    revoked = assignments.revoke_all_in_scope(
        db, user_id, ScopeType.event, event.id, revoked_by_id=removed_by_id
    )
    db.commit()
    return revoked
