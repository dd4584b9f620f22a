from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from conducky.api.v1.schemas import audit_page_to_dict
from conducky.core.security import DB, require_min_level
from conducky.db.models.event import Event
from conducky.db.models.organization import Organization
from conducky.db.models.user import User
from conducky.domain.enums import RoleName, ScopeType
from conducky.services import audit_service
from conducky.services.role_catalog import ROLE_LEVELS

router = APIRouter(prefix="/audit", tags=["audit"])

EventAuditor = Annotated[
    Event, Depends(require_min_level(ROLE_LEVELS[RoleName.event_admin], ScopeType.event))
]
OrgAuditor = Annotated[
    Organization,
    Depends(require_min_level(ROLE_LEVELS[RoleName.org_admin], ScopeType.organization)),
]
SystemAuditor = Annotated[
    User, Depends(require_min_level(ROLE_LEVELS[RoleName.system_admin], ScopeType.system))
]

Page = Annotated[int, Query(ge=1)]
Limit = Annotated[int, Query(ge=1, le=audit_service.MAX_PAGE_SIZE)]


@router.get("/events/{event_ref}")
def event_logs(
    event: EventAuditor,
    db: DB,
    page: Page = 1,
    limit: Limit = audit_service.DEFAULT_PAGE_SIZE,
    action: str | None = None,
):
    result = audit_service.list_event_audit_logs(
        db, event.id, page=page, limit=limit, action=action
    )
    return audit_page_to_dict(result)


@router.get("/organizations/{org_ref}")
def organization_logs(
    org: OrgAuditor,
    db: DB,
    page: Page = 1,
    limit: Limit = audit_service.DEFAULT_PAGE_SIZE,
    action: str | None = None,
):
    """Organization entries plus those of its events."""
    result = audit_service.list_organization_audit_logs(
        db, org.id, page=page, limit=limit, action=action
    )
    return audit_page_to_dict(result)


@router.get("/system")
def system_logs(
    _user: SystemAuditor,
    db: DB,
    page: Page = 1,
    limit: Limit = audit_service.DEFAULT_PAGE_SIZE,
    action: str | None = None,
):
    result = audit_service.list_system_audit_logs(db, page=page, limit=limit, action=action)
    return audit_page_to_dict(result)
