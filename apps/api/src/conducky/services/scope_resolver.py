"""Map a requested resource to the ordered scope chain an authorization walks.

Chains run from most to least senior:

    system                       -> [SYSTEM]
    organization                 -> [SYSTEM, org]
    event inside an organization -> [SYSTEM, org, event]
    event without organization   -> [SYSTEM, event]
"""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from conducky.core.errors import ScopeNotFound
from conducky.db.models.event import Event
from conducky.db.models.organization import Organization
from conducky.domain.enums import SYSTEM_SCOPE_ID, ScopeType
from conducky.domain.scopes import SYSTEM_SCOPE, Scope


def _as_uuid(ref: str | uuid.UUID) -> uuid.UUID | None:
    if isinstance(ref, uuid.UUID):
        return ref
    try:
        return uuid.UUID(ref)
    except (ValueError, TypeError):
        return None


def resolve_event(db: Session, ref: str | uuid.UUID) -> Event:
    """Look an event up by id or slug."""
    event_id = _as_uuid(ref)
    if event_id is not None:
        event = db.get(Event, event_id)
    else:
        event = db.query(Event).filter(Event.slug == ref).first()
    if event is None:
        raise ScopeNotFound("Event not found")
    return event


def resolve_organization(db: Session, ref: str | uuid.UUID) -> Organization:
    """Look an organization up by id or slug."""
    org_id = _as_uuid(ref)
    if org_id is not None:
        org = db.get(Organization, org_id)
    else:
        org = db.query(Organization).filter(Organization.slug == ref).first()
    if org is None:
        raise ScopeNotFound("Organization not found")
    return org


def resolve_scope_chain(
    db: Session, scope_type: ScopeType | str, scope_id: str | uuid.UUID
) -> list[Scope]:
    scope_type = ScopeType(scope_type)

    if scope_type == ScopeType.system:
        if str(scope_id) != SYSTEM_SCOPE_ID:
            raise ScopeNotFound("Scope not found")
        return [SYSTEM_SCOPE]

    entity_id = _as_uuid(scope_id)

    if scope_type == ScopeType.organization:
        if entity_id is None or db.get(Organization, entity_id) is None:
            raise ScopeNotFound("Organization not found")
        return [SYSTEM_SCOPE, Scope.of(ScopeType.organization, entity_id)]

    event = db.get(Event, entity_id) if entity_id is not None else None
    if event is None:
        raise ScopeNotFound("Event not found")
    chain = [SYSTEM_SCOPE]
    if event.organization_id is not None:
        chain.append(Scope.of(ScopeType.organization, event.organization_id))
    chain.append(Scope.of(ScopeType.event, event.id))
    return chain
