from __future__ import annotations

import uuid
from dataclasses import dataclass

from conducky.domain.enums import SYSTEM_SCOPE_ID, ScopeType


@dataclass(frozen=True, slots=True)
class Scope:
    """A (type, id) pair naming the boundary a role grant applies to."""

    type: ScopeType
    id: str

    @classmethod
    def of(cls, scope_type: ScopeType | str, scope_id: uuid.UUID | str) -> Scope:
        return cls(ScopeType(scope_type), str(scope_id))

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


SYSTEM_SCOPE = Scope(ScopeType.system, SYSTEM_SCOPE_ID)
