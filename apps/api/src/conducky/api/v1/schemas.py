from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from conducky.db.models.audit import AuditLog
from conducky.services.audit_service import AuditPage
from conducky.services.invite_service import InviteLink, invite_url


class RoleChange(BaseModel):
    user_id: uuid.UUID
    role: str


class InviteOptions(BaseModel):
    max_uses: int | None = None
    expires_at: datetime | None = None
    note: str | None = None


def invite_to_dict(link: InviteLink) -> dict:
    return {
        "id": str(link.id),
        "code": link.code,
        "url": invite_url(link),
        "role": link.role,
        "max_uses": link.max_uses,
        "use_count": link.use_count,
        "expires_at": link.expires_at.isoformat() if link.expires_at else None,
        "disabled": link.disabled,
        "note": link.note,
    }


def audit_log_to_dict(e: AuditLog) -> dict:
    return {
        "id": str(e.id),
        "action": e.action,
        "target_type": e.target_type,
        "target_id": e.target_id,
        "user_id": str(e.user_id) if e.user_id else None,
        "event_id": str(e.event_id) if e.event_id else None,
        "organization_id": str(e.organization_id) if e.organization_id else None,
        "detail": e.detail,
        "timestamp": e.timestamp.isoformat() if e.timestamp else None,
    }


def audit_page_to_dict(page: AuditPage) -> dict:
    return {
        "logs": [audit_log_to_dict(e) for e in page.logs],
        "pagination": {
            "page": page.page,
            "limit": page.limit,
            "total": page.total,
            "totalPages": page.total_pages,
        },
    }
