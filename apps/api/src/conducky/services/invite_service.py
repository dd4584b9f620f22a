"""Organization and event invite links.

A link grants its role at its organization or event to whoever redeems it.
Codes share one namespace across both kinds, so ``/invites/{code}`` can
resolve either.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from datetime import UTC, datetime

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from conducky.core.config import settings
from conducky.core.errors import ConflictError, InviteNotFound, InviteUnavailable
from conducky.db.models.event import Event
from conducky.db.models.invite import EventInviteLink, OrganizationInviteLink
from conducky.db.models.organization import Organization
from conducky.domain.enums import AuditAction, RoleName, ScopeType
from conducky.services import role_assignment_service as assignments
from conducky.services.audit_service import log_audit

logger = logging.getLogger(__name__)

InviteLink = OrganizationInviteLink | EventInviteLink


def invite_url(link: InviteLink) -> str:
    if isinstance(link, EventInviteLink):
        return f"{settings.FRONTEND_BASE_URL}/invite/{link.code}"
    return f"{settings.FRONTEND_BASE_URL}/org-invite/{link.code}"


def _new_code() -> str:
    return secrets.token_hex(16)


def create_invite(
    db: Session,
    org: Organization,
    *,
    created_by_id: uuid.UUID,
    role: str = RoleName.org_viewer,
    max_uses: int | None = None,
    expires_at: datetime | None = None,
    note: str | None = None,
) -> OrganizationInviteLink:
    assignments.require_role_for_scope(db, role, ScopeType.organization)
    link = OrganizationInviteLink(
        organization_id=org.id,
        code=_new_code(),
        role=role,
        created_by_id=created_by_id,
        max_uses=max_uses,
        expires_at=expires_at,
        note=note,
    )
    db.add(link)
    db.flush()
    log_audit(
        db,
        action=AuditAction.invite_created,
        target_type="OrganizationInviteLink",
        target_id=link.id,
        user_id=created_by_id,
        organization_id=org.id,
    )
    db.commit()
    db.refresh(link)
    return link


def create_event_invite(
    db: Session,
    event: Event,
    *,
    created_by_id: uuid.UUID,
    role: str = RoleName.reporter,
    max_uses: int | None = None,
    expires_at: datetime | None = None,
    note: str | None = None,
) -> EventInviteLink:
    assignments.require_role_for_scope(db, role, ScopeType.event)
    link = EventInviteLink(
        event_id=event.id,
        code=_new_code(),
        role=role,
        created_by_id=created_by_id,
        max_uses=max_uses,
        expires_at=expires_at,
        note=note,
    )
    db.add(link)
    db.flush()
    log_audit(
        db,
        action=AuditAction.invite_created,
        target_type="EventInviteLink",
        target_id=link.id,
        user_id=created_by_id,
        event_id=event.id,
        organization_id=event.organization_id,
    )
    db.commit()
    db.refresh(link)
    return link


def list_invites(db: Session, org: Organization) -> list[OrganizationInviteLink]:
    return (
        db.query(OrganizationInviteLink)
        .filter(OrganizationInviteLink.organization_id == org.id)
        .order_by(OrganizationInviteLink.created_at.desc())
        .all()
    )


def list_event_invites(db: Session, event: Event) -> list[EventInviteLink]:
    return (
        db.query(EventInviteLink)
        .filter(EventInviteLink.event_id == event.id)
        .order_by(EventInviteLink.created_at.desc())
        .all()
    )


def set_invite_disabled(
    db: Session,
    org: Organization,
    invite_id: uuid.UUID,
    *,
    disabled: bool,
    updated_by_id: uuid.UUID,
) -> OrganizationInviteLink:
    link = db.get(OrganizationInviteLink, invite_id)
    if link is None or link.organization_id != org.id:
        raise InviteNotFound("Invite link not found")
    link.disabled = disabled
    log_audit(
        db,
        action=AuditAction.invite_updated,
        target_type="OrganizationInviteLink",
        target_id=link.id,
        user_id=updated_by_id,
        organization_id=org.id,
        detail={"disabled": disabled},
    )
    db.commit()
    db.refresh(link)
    return link


def find_by_code(db: Session, code: str) -> InviteLink:
    for model in (EventInviteLink, OrganizationInviteLink):
        link = db.query(model).filter(model.code == code).first()
        if link is not None:
            return link
    raise InviteNotFound()


def invite_details(db: Session, code: str) -> dict:
    """What a prospective member sees before redeeming a code."""
    link = find_by_code(db, code)
    if isinstance(link, EventInviteLink):
        scope_type, target = ScopeType.event, link.event
    else:
        scope_type, target = ScopeType.organization, link.organization
    return {
        "code": link.code,
        "scope_type": scope_type,
        "scope": {"id": str(target.id), "name": target.name, "slug": target.slug},
        "role": link.role,
        "expires_at": link.expires_at.isoformat() if link.expires_at else None,
        "disabled": link.disabled,
        "max_uses": link.max_uses,
        "use_count": link.use_count,
    }


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _claim_use(db: Session, link: InviteLink) -> None:
    """Count one redemption in the database; fails once max_uses is reached."""
    model = type(link)
    result = db.execute(
        update(model)
        .where(
            model.id == link.id,
            or_(model.max_uses.is_(None), model.use_count < model.max_uses),
        )
        .values(use_count=model.use_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise InviteUnavailable("This invite link has reached its maximum usage limit")


def redeem_invite(db: Session, code: str, user_id: uuid.UUID) -> InviteLink:
    """Grant the invite's role at its organization or event to the redeeming user."""
    link = find_by_code(db, code)
    if link.disabled:
        raise InviteUnavailable("This invite link has been disabled")
    if link.expires_at is not None and _as_aware(link.expires_at) < datetime.now(UTC):
        raise InviteUnavailable("This invite link has expired")

    if isinstance(link, EventInviteLink):
        scope_type, scope_id = ScopeType.event, link.event_id
        already = "You are already a member of this event"
        columns = {"event_id": link.event_id, "organization_id": link.event.organization_id}
    else:
        scope_type, scope_id = ScopeType.organization, link.organization_id
        already = "You are already a member of this organization"
        columns = {"organization_id": link.organization_id}

    if assignments.list_for_user(db, user_id, scope_type, scope_id):
        raise ConflictError(already)

    _claim_use(db, link)
    assignments.grant(db, user_id, link.role, scope_type, scope_id, link.created_by_id)
    log_audit(
        db,
        action=AuditAction.invite_redeemed,
        target_type=type(link).__name__,
        target_id=link.id,
        user_id=user_id,
        **columns,
    )
    db.commit()
    db.refresh(link)
    logger.info("invite %s redeemed by user=%s", link.id, user_id)
    return link
