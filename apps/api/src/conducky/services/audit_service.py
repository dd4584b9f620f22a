from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from conducky.db.models.audit import AuditLog
from conducky.db.models.event import Event
from conducky.domain.enums import ScopeType
from conducky.domain.scopes import Scope

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


@dataclass
class AuditPage:
    logs: list[AuditLog]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def scope_columns(scope: Scope) -> dict:
    """event_id / organization_id keyword arguments for an entry about a scope."""
    if scope.type == ScopeType.event:
        return {"event_id": uuid.UUID(scope.id)}
    if scope.type == ScopeType.organization:
        return {"organization_id": uuid.UUID(scope.id)}
    return {}


def log_audit(
    db: Session,
    *,
    action: str,
    target_type: str,
    target_id: str | uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    event_id: uuid.UUID | None = None,
    organization_id: uuid.UUID | None = None,
    detail: dict | str | None = None,
) -> AuditLog:
    if isinstance(detail, dict):
        detail = json.dumps(detail, default=str)
    entry = AuditLog(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        event_id=event_id,
        organization_id=organization_id,
        detail=detail,
    )
    db.add(entry)
    db.flush()
    return entry


def _paginate(
    query: Query, *, page: int, limit: int, action: str | None
) -> AuditPage:
    page = max(1, page)
    limit = min(MAX_PAGE_SIZE, max(1, limit))
    if action:
        query = query.filter(AuditLog.action == action)
    total = query.count()
    logs = (
        query.order_by(AuditLog.timestamp.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return AuditPage(logs=logs, total=total, page=page, limit=limit)


def list_event_audit_logs(
    db: Session,
    event_id: uuid.UUID,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    action: str | None = None,
) -> AuditPage:
    query = db.query(AuditLog).filter(AuditLog.event_id == event_id)
    return _paginate(query, page=page, limit=limit, action=action)


def list_organization_audit_logs(
    db: Session,
    organization_id: uuid.UUID,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    action: str | None = None,
) -> AuditPage:
    """Organization-level entries plus entries for any of the organization's events."""
    event_ids = [
        row[0]
        for row in db.query(Event.id).filter(Event.organization_id == organization_id).all()
    ]
    clauses = [AuditLog.organization_id == organization_id]
    if event_ids:
        clauses.append(AuditLog.event_id.in_(event_ids))
    query = db.query(AuditLog).filter(or_(*clauses))
    return _paginate(query, page=page, limit=limit, action=action)


def list_system_audit_logs(
    db: Session,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    action: str | None = None,
) -> AuditPage:
    return _paginate(db.query(AuditLog), page=page, limit=limit, action=action)


def purge_audit_logs(db: Session, *, older_than_days: int) -> dict:
    """Delete audit entries older than the retention window.

    A window of 0 or less disables purging.
    """
    now = datetime.now(UTC)
    if older_than_days <= 0:
        return {"checked_at": now.isoformat(), "purged": 0}

    cutoff = now - timedelta(days=older_than_days)
    purged = (
        db.query(AuditLog)
        .filter(AuditLog.timestamp < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("purge_audit_logs: removed %d entries older than %s", purged, cutoff.isoformat())
    return {"checked_at": now.isoformat(), "purged": purged}
