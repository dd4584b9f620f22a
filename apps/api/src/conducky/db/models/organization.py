from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from conducky.db.base import Base

if TYPE_CHECKING:
    from conducky.db.models.event import Event
    from conducky.db.models.invite import OrganizationInviteLink


class Organization(Base):
    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), default=None
    )

    events: Mapped[list[Event]] = relationship(back_populates="organization")
    invite_links: Mapped[list[OrganizationInviteLink]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )
