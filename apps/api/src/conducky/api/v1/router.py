from fastapi import APIRouter

from conducky.api.v1.admin import router as admin_router
from conducky.api.v1.audit import router as audit_router
from conducky.api.v1.auth import router as auth_router
from conducky.api.v1.events import router as events_router
from conducky.api.v1.health import router as health_router
from conducky.api.v1.invites import router as invites_router
from conducky.api.v1.organizations import router as organizations_router
from conducky.api.v1.roles import router as roles_router

router = APIRouter()

# Public
router.include_router(health_router)
router.include_router(auth_router)

# Protected (auth enforced per-endpoint or at router level)
router.include_router(roles_router)
router.include_router(organizations_router)
router.include_router(events_router)
router.include_router(invites_router)
router.include_router(audit_router)
router.include_router(admin_router)
