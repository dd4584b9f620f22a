from enum import StrEnum


class ScopeType(StrEnum):
    system = "system"
    organization = "organization"
    event = "event"


class RoleName(StrEnum):
    system_admin = "system_admin"
    org_admin = "org_admin"
    org_viewer = "org_viewer"
    event_admin = "event_admin"
    responder = "responder"
    reporter = "reporter"


class AuditAction(StrEnum):
    role_granted = "role_granted"
    role_revoked = "role_revoked"
    access_denied = "access_denied"
    login_successful = "login_successful"
    login_failed = "login_failed"
    user_registered = "user_registered"
    organization_created = "organization_created"
    organization_deleted = "organization_deleted"
    event_created = "event_created"
    event_deleted = "event_deleted"
    invite_created = "invite_created"
    invite_updated = "invite_updated"
    invite_redeemed = "invite_redeemed"


SYSTEM_SCOPE_ID = "SYSTEM"

ORG_ROLES = (RoleName.org_admin, RoleName.org_viewer)
EVENT_ROLES = (RoleName.event_admin, RoleName.responder, RoleName.reporter)
