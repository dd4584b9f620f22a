from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from conducky.api.v1.schemas import InviteOptions, RoleChange, invite_to_dict
from conducky.core.security import DB, CurrentUser, SystemAdmin, require_event_role
from conducky.db.models.event import Event
from conducky.domain.enums import EVENT_ROLES, RoleName
from conducky.services import event_service, invite_service
from conducky.services.scope_resolver import resolve_organization

router = APIRouter(prefix="/events", tags=["events"])

AnyEventRole = Annotated[Event, Depends(require_event_role(*EVENT_ROLES))]
EventAdmin = Annotated[Event, Depends(require_event_role(RoleName.event_admin))]
EventSystemAdmin = Annotated[Event, Depends(require_event_role(RoleName.system_admin))]


# -- Schemas ------------------------------------------------------------------


class EventCreate(BaseModel):
    name: str
    slug: str
    description: str | None = None
    organization_id: uuid.UUID | None = None


class EventInviteCreate(InviteOptions):
    role: str = RoleName.reporter


# -- Helpers ------------------------------------------------------------------


def event_to_dict(e: Event) -> dict:
    return {
        "id": str(e.id),
        "name": e.name,
        "slug": e.slug,
        "description": e.description,
        "organization_id": str(e.organization_id) if e.organization_id else None,
        "is_active": e.is_active,
        "created_at": e.created_at.isoformat() if e.created_at else None,
    }


# -- Endpoints ----------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED)
def create(body: EventCreate, user: SystemAdmin, db: DB):
    if body.organization_id is not None:
        resolve_organization(db, body.organization_id)
    event = event_service.create_event(
        db,
        name=body.name,
        slug=body.slug,
        description=body.description,
        organization_id=body.organization_id,
        created_by_id=user.id,
    )
    return event_to_dict(event)


@router.get("/{event_ref}")
def get_event(event: AnyEventRole):
    return event_to_dict(event)


@router.delete("/{event_ref}", status_code=status.HTTP_204_NO_CONTENT)
def delete(event: EventSystemAdmin, user: CurrentUser, db: DB):
    event_service.delete_event(db, event, deleted_by_id=user.id)


@router.get("/{event_ref}/users")
def list_users(event: AnyEventRole, db: DB):
    return {"users": event_service.list_event_users(db, event)}


@router.get("/{event_ref}/my-roles")
def my_roles(event: AnyEventRole, user: CurrentUser, db: DB):
    return {"roles": event_service.user_event_roles(db, event, user.id)}


@router.post("/{event_ref}/roles", status_code=status.HTTP_201_CREATED)
def grant_role(body: RoleChange, event: EventAdmin, user: CurrentUser, db: DB):
    event_service.assign_role(
        db, event, user_id=body.user_id, role_name=body.role, granted_by_id=user.id
    )
    return {"user_id": str(body.user_id), "role": body.role, "event_id": str(event.id)}


@router.delete(
    "/{event_ref}/users/{user_id}/roles/{role_name}", status_code=status.HTTP_204_NO_CONTENT
)
def revoke_role(
    user_id: uuid.UUID, role_name: str, event: EventAdmin, user: CurrentUser, db: DB
):
    event_service.revoke_role(
        db, event, user_id=user_id, role_name=role_name, revoked_by_id=user.id
    )


@router.delete("/{event_ref}/users/{user_id}")
def remove_user(user_id: uuid.UUID, event: EventAdmin, user: CurrentUser, db: DB):
    """Remove every role the user holds at this event."""
    revoked = event_service.remove_user(db, event, user_id=user_id, removed_by_id=user.id)
    return {"revoked": revoked}


@router.post("/{event_ref}/invites", status_code=status.HTTP_201_CREATED)
def create_invite(body: EventInviteCreate, event: EventAdmin, user: CurrentUser, db: DB):
    link = invite_service.create_event_invite(
        db,
        event,
        created_by_id=user.id,
        role=body.role,
        max_uses=body.max_uses,
        expires_at=body.expires_at,
        note=body.note,
    )
    return invite_to_dict(link)


@router.get("/{event_ref}/invites")
def list_invites(event: EventAdmin, db: DB):
    links = invite_service.list_event_invites(db, event)
    return {"invites": [invite_to_dict(link) for link in links]}
