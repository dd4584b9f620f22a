from conducky.db.models.audit import AuditLog
from conducky.db.models.event import Event
from conducky.db.models.invite import EventInviteLink, OrganizationInviteLink
from conducky.db.models.organization import Organization
from conducky.db.models.role import Role
from conducky.db.models.user import User
from conducky.db.models.user_role import UserRole

__all__ = [
    "AuditLog",
    "Event",
    "EventInviteLink",
    "Organization",
    "OrganizationInviteLink",
    "Role",
    "User",
    "UserRole",
]
