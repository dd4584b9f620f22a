from fastapi import APIRouter

from conducky.core.security import DB, CurrentUser
from conducky.db.models.invite import EventInviteLink
from conducky.services.invite_service import invite_details, redeem_invite

router = APIRouter(prefix="/invites", tags=["invites"])


@router.get("/{code}")
def get_invite(code: str, db: DB):
    """Public: the code is the credential."""
    return invite_details(db, code)


@router.post("/{code}/redeem")
def redeem(code: str, user: CurrentUser, db: DB):
    link = redeem_invite(db, code, user.id)
    if isinstance(link, EventInviteLink):
        return {"event_id": str(link.event_id), "role": link.role}
    return {"organization_id": str(link.organization_id), "role": link.role}
