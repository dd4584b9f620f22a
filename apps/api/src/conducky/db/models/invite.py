from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from conducky.db.base import Base

if TYPE_CHECKING:
    from conducky.db.models.event import Event
    from conducky.db.models.organization import Organization


class InviteLinkMixin:
    """Columns shared by organization and event invite links."""

    code: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    role: Mapped[str] = mapped_column(String(50))
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), default=None
    )
    max_uses: Mapped[int | None] = mapped_column(default=None)
    use_count: Mapped[int] = mapped_column(default=0)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    disabled: Mapped[bool] = mapped_column(default=False)
    note: Mapped[str | None] = mapped_column(Text, default=None)


class OrganizationInviteLink(InviteLinkMixin, Base):
    __tablename__ = "organization_invite_links"

    organization_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), index=True
    )

    organization: Mapped[Organization] = relationship(back_populates="invite_links")


class EventInviteLink(InviteLinkMixin, Base):
    __tablename__ = "event_invite_links"

    event_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), index=True
    )

    event: Mapped[Event] = relationship(back_populates="invite_links")
