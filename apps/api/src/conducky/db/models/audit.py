from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from conducky.db.base import Base


class AuditLog(Base):
    """Append-only. Only the retention job removes rows."""

    __tablename__ = "audit_logs"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), default=None, index=True
    )
    action: Mapped[str] = mapped_column(String(100), index=True)
    target_type: Mapped[str] = mapped_column(String(50))
    target_id: Mapped[str | None] = mapped_column(String(320), default=None)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), index=True
    )
    # Plain columns, not foreign keys: entries outlive the entities they mention.
    organization_id: Mapped[uuid.UUID | None] = mapped_column(default=None, index=True)
    event_id: Mapped[uuid.UUID | None] = mapped_column(default=None, index=True)
    detail: Mapped[str | None] = mapped_column(Text, default=None)
