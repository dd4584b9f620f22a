from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from conducky.api.v1.schemas import RoleChange
from conducky.core.security import DB, SystemAdmin
from conducky.domain.enums import SYSTEM_SCOPE_ID, ScopeType
from conducky.services import role_assignment_service as assignments

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/roles", status_code=status.HTTP_201_CREATED)
def grant_system_role(body: RoleChange, user: SystemAdmin, db: DB):
    """Grant a system-scope role. System admin only."""
    assignments.require_role_for_scope(db, body.role, ScopeType.system)
    assignments.grant(db, body.user_id, body.role, ScopeType.system, SYSTEM_SCOPE_ID, user.id)
    db.commit()
    return {"user_id": str(body.user_id), "role": body.role, "scope_id": SYSTEM_SCOPE_ID}


@router.delete("/users/{user_id}/roles/{role_name}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_system_role(user_id: uuid.UUID, role_name: str, user: SystemAdmin, db: DB):
    assignments.revoke(
        db, user_id, role_name, ScopeType.system, SYSTEM_SCOPE_ID, revoked_by_id=user.id
    )
    db.commit()


@router.get("/users/{user_id}/roles")
def user_roles(user_id: uuid.UUID, _user: SystemAdmin, db: DB):
    return assignments.roles_by_scope(db, user_id)
