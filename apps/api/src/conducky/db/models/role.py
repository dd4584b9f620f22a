from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from conducky.db.base import Base


class Role(Base):
    """Catalog entry. Seeded once, read through the in-process role catalog."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    scope: Mapped[str] = mapped_column(String(20))
    level: Mapped[int] = mapped_column(default=0)
