from __future__ import annotations

import logging
import re
import uuid

from sqlalchemy.orm import Session

from conducky.core.errors import ConflictError, ValidationError
from conducky.db.models.event import Event
from conducky.db.models.organization import Organization
from conducky.domain.enums import AuditAction, RoleName, ScopeType
from conducky.services import role_assignment_service as assignments
from conducky.services.audit_service import log_audit

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def validate_slug(slug: str) -> None:
    if not SLUG_PATTERN.match(slug):
        raise ValidationError(
            "Slug must be all lowercase, URL-safe (letters, numbers, hyphens only, no spaces)."
        )


def create_organization(
    db: Session,
    *,
    name: str,
    slug: str,
    created_by_id: uuid.UUID,
    description: str | None = None,
) -> Organization:
    """Create an organization and make its creator org_admin."""
    validate_slug(slug)
    if db.query(Organization).filter(Organization.slug == slug).first() is not None:
        raise ConflictError("Organization slug already exists")

    org = Organization(name=name, slug=slug, description=description, created_by_id=created_by_id)
    db.add(org)
    db.flush()

    assignments.grant(
        db, created_by_id, RoleName.org_admin, ScopeType.organization, org.id, created_by_id
    )
    log_audit(
        db,
        action=AuditAction.organization_created,
        target_type="Organization",
        target_id=org.id,
        user_id=created_by_id,
        organization_id=org.id,
    )
    db.commit()
    db.refresh(org)
    logger.info("organization %s created by user=%s", org.id, created_by_id)
    return org


def delete_organization(db: Session, org: Organization, *, deleted_by_id: uuid.UUID) -> None:
    """Delete an organization and every role scoped to it. Refused while it still has events."""
    if db.query(Event).filter(Event.organization_id == org.id).count() > 0:
        raise ConflictError("Cannot delete organization with existing events")

    org_id = org.id
    assignments.delete_scope_assignments(db, ScopeType.organization, org_id)
    db.delete(org)
    log_audit(
        db,
        action=AuditAction.organization_deleted,
        target_type="Organization",
        target_id=org_id,
        user_id=deleted_by_id,
        organization_id=org_id,
    )
    db.commit()


def list_members(db: Session, org: Organization) -> list[dict]:
    return assignments.users_with_roles(db, ScopeType.organization, org.id)


def assign_role(
    db: Session,
    org: Organization,
    *,
    user_id: uuid.UUID,
    role_name: str,
    granted_by_id: uuid.UUID,
) -> None:
    assignments.require_role_for_scope(db, role_name, ScopeType.organization)
    assignments.grant(db, user_id, role_name, ScopeType.organization, org.id, granted_by_id)
    db.commit()


def revoke_role(
    db: Session,
    org: Organization,
    *,
    user_id: uuid.UUID,
    role_name: str,
    revoked_by_id: uuid.UUID,
) -> None:
    assignments.revoke(
        db, user_id, role_name, ScopeType.organization, org.id, revoked_by_id=revoked_by_id
    )
    db.commit()


def remove_member(
    db: Session, org: Organization, *, user_id: uuid.UUID, removed_by_id: uuid.UUID
) -> list[str]:
    revoked = assignments.revoke_all_in_scope(
        db, user_id, ScopeType.organization, org.id, revoked_by_id=removed_by_id
    )
    db.commit()
    return revoked
