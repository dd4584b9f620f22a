from fastapi import APIRouter, Depends

from conducky.core.security import DB, require_user
from conducky.services.role_catalog import list_roles

router = APIRouter(prefix="/roles", tags=["roles"], dependencies=[Depends(require_user)])


@router.get("")
def list_all(db: DB):
    """The role catalog, most senior first."""
    return [
        {
            "id": str(r.id),
            "name": r.name,
            "scope": r.scope,
            "level": r.level,
            "description": r.description,
        }
        for r in list_roles(db)
    ]
