from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from conducky.api.v1.events import EventCreate, event_to_dict
from conducky.api.v1.schemas import InviteOptions, RoleChange, invite_to_dict
from conducky.core.security import DB, CurrentUser, SystemAdmin, require_org_role
from conducky.db.models.organization import Organization
from conducky.domain.enums import ORG_ROLES, RoleName
from conducky.services import event_service, invite_service, organization_service

router = APIRouter(prefix="/organizations", tags=["organizations"])

AnyOrgRole = Annotated[Organization, Depends(require_org_role(*ORG_ROLES))]
OrgAdmin = Annotated[Organization, Depends(require_org_role(RoleName.org_admin))]
OrgSystemAdmin = Annotated[Organization, Depends(require_org_role(RoleName.system_admin))]


# -- Schemas ------------------------------------------------------------------


class OrganizationCreate(BaseModel):
    name: str
    slug: str
    description: str | None = None


class InviteCreate(InviteOptions):
    role: str = RoleName.org_viewer


class InviteUpdate(BaseModel):
    disabled: bool


# -- Helpers ------------------------------------------------------------------


def _org_to_dict(o: Organization) -> dict:
    return {
        "id": str(o.id),
        "name": o.name,
        "slug": o.slug,
        "description": o.description,
        "created_at": o.created_at.isoformat() if o.created_at else None,
    }


# -- Endpoints ----------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED)
def create(body: OrganizationCreate, user: SystemAdmin, db: DB):
    org = organization_service.create_organization(
        db,
        name=body.name,
        slug=body.slug,
        description=body.description,
        created_by_id=user.id,
    )
    return _org_to_dict(org)


@router.get("/{org_ref}")
def get_organization(org: AnyOrgRole):
    return _org_to_dict(org)


@router.delete("/{org_ref}", status_code=status.HTTP_204_NO_CONTENT)
def delete(org: OrgSystemAdmin, user: CurrentUser, db: DB):
    organization_service.delete_organization(db, org, deleted_by_id=user.id)


@router.get("/{org_ref}/users")
def list_users(org: AnyOrgRole, db: DB):
    return {"users": organization_service.list_members(db, org)}


@router.post("/{org_ref}/roles", status_code=status.HTTP_201_CREATED)
def grant_role(body: RoleChange, org: OrgAdmin, user: CurrentUser, db: DB):
    organization_service.assign_role(
        db, org, user_id=body.user_id, role_name=body.role, granted_by_id=user.id
    )
    return {"user_id": str(body.user_id), "role": body.role, "organization_id": str(org.id)}


@router.delete(
    "/{org_ref}/users/{user_id}/roles/{role_name}", status_code=status.HTTP_204_NO_CONTENT
)
def revoke_role(user_id: uuid.UUID, role_name: str, org: OrgAdmin, user: CurrentUser, db: DB):
    organization_service.revoke_role(
        db, org, user_id=user_id, role_name=role_name, revoked_by_id=user.id
    )


@router.delete("/{org_ref}/users/{user_id}")
def remove_user(user_id: uuid.UUID, org: OrgAdmin, user: CurrentUser, db: DB):
    revoked = organization_service.remove_member(db, org, user_id=user_id, removed_by_id=user.id)
    return {"revoked": revoked}


@router.post("/{org_ref}/events", status_code=status.HTTP_201_CREATED)
def create_event(body: EventCreate, org: OrgAdmin, user: CurrentUser, db: DB):
    """Create an event inside this organization; organization_id in the body is ignored."""
    event = event_service.create_event(
        db,
        name=body.name,
        slug=body.slug,
        description=body.description,
        organization_id=org.id,
        created_by_id=user.id,
    )
    return event_to_dict(event)


@router.post("/{org_ref}/invites", status_code=status.HTTP_201_CREATED)
def create_invite(body: InviteCreate, org: OrgAdmin, user: CurrentUser, db: DB):
    link = invite_service.create_invite(
        db,
        org,
        created_by_id=user.id,
        role=body.role,
        max_uses=body.max_uses,
        expires_at=body.expires_at,
        note=body.note,
    )
    return invite_to_dict(link)


@router.get("/{org_ref}/invites")
def list_invites(org: OrgAdmin, db: DB):
    return {"invites": [invite_to_dict(link) for link in invite_service.list_invites(db, org)]}


@router.patch("/{org_ref}/invites/{invite_id}")
def update_invite(
    invite_id: uuid.UUID, body: InviteUpdate, org: OrgAdmin, user: CurrentUser, db: DB
):
    link = invite_service.set_invite_disabled(
        db, org, invite_id, disabled=body.disabled, updated_by_id=user.id
    )
    return invite_to_dict(link)
