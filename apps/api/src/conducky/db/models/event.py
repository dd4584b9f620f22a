from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from conducky.db.base import Base

if TYPE_CHECKING:
    from conducky.db.models.invite import EventInviteLink
    from conducky.db.models.organization import Organization


class Event(Base):
    __tablename__ = "events"

    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("organizations.id"), default=None, index=True
    )
    is_active: Mapped[bool] = mapped_column(default=True)

    organization: Mapped[Organization | None] = relationship(back_populates="events")
    invite_links: Mapped[list[EventInviteLink]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )
