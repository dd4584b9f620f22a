from __future__ import annotations

import logging
import uuid as _uuid
from datetime import UTC, datetime, timedelta
from typing import Annotated

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from conducky.core.config import settings
from conducky.core.errors import forbidden
from conducky.db.models.event import Event
from conducky.db.models.organization import Organization
from conducky.db.models.user import User
from conducky.db.session import get_db
from conducky.domain.enums import SYSTEM_SCOPE_ID, RoleName, ScopeType
from conducky.domain.scopes import Scope
from conducky.services.authorization_service import authorize, record_denial
from conducky.services.scope_resolver import resolve_event, resolve_organization

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def create_access_token(subject: str, extra: dict | None = None) -> str:
    now = datetime.now(UTC)
    exp = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": subject, "iat": int(now.timestamp()), "exp": int(exp.timestamp())}
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALG],
        options={"verify_exp": True},
    )


_credentials_exc = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def require_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """FastAPI dependency: resolves the current authenticated user from the JWT."""
    try:
        payload = decode_access_token(token)
        raw_sub: str | None = payload.get("sub")
        if raw_sub is None:
            raise _credentials_exc
        user_id = _uuid.UUID(raw_sub)
    except (JWTError, ValueError):
        raise _credentials_exc from None

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise _credentials_exc
    return user


CurrentUser = Annotated[User, Depends(require_user)]
DB = Annotated[Session, Depends(get_db)]


# -- Authorization guards ------------------------------------------------------
#
# Order for every guard: 401 (no user), 404 (scope does not exist), 403 (denied).


def _enforce(
    db: Session,
    user: User,
    scope: Scope,
    *,
    roles: tuple[str, ...] | None = None,
    min_level: int | None = None,
) -> None:
    decision = authorize(db, user.id, scope.type, scope.id, roles=roles, min_level=min_level)
    if decision:
        return
    if settings.AUDIT_ACCESS_DENIALS:
        record_denial(db, user.id, scope)
    raise forbidden()


def require_event_role(*roles: str):
    """Dependency factory: the caller needs one of ``roles`` at the event in ``{event_ref}``.

    The resolved Event is returned so handlers can take it as a parameter.
    """

    async def _check(event_ref: str, user: CurrentUser, db: DB) -> Event:
        event = resolve_event(db, event_ref)
        _enforce(db, user, Scope.of(ScopeType.event, event.id), roles=roles)
        return event

    return _check


def require_org_role(*roles: str):
    """Dependency factory: the caller needs one of ``roles`` at the organization in ``{org_ref}``."""

    async def _check(org_ref: str, user: CurrentUser, db: DB) -> Organization:
        org = resolve_organization(db, org_ref)
        _enforce(db, user, Scope.of(ScopeType.organization, org.id), roles=roles)
        return org

    return _check


def require_min_level(min_level: int, scope_type: ScopeType = ScopeType.event):
    """Dependency factory for level-based checks instead of named roles."""
    if scope_type == ScopeType.event:

        async def _check_event(event_ref: str, user: CurrentUser, db: DB) -> Event:
            event = resolve_event(db, event_ref)
            _enforce(db, user, Scope.of(ScopeType.event, event.id), min_level=min_level)
            return event

        return _check_event

    if scope_type == ScopeType.organization:

        async def _check_org(org_ref: str, user: CurrentUser, db: DB) -> Organization:
            org = resolve_organization(db, org_ref)
            _enforce(db, user, Scope.of(ScopeType.organization, org.id), min_level=min_level)
            return org

        return _check_org

    async def _check_system(user: CurrentUser, db: DB) -> User:
        _enforce(db, user, Scope.of(ScopeType.system, SYSTEM_SCOPE_ID), min_level=min_level)
        return user

    return _check_system


def require_role(*roles: str, scope_type: ScopeType = ScopeType.event):
    """Pick the guard for ``scope_type``; the route supplies the matching path parameter."""
    if scope_type == ScopeType.event:
        return require_event_role(*roles)
    if scope_type == ScopeType.organization:
        return require_org_role(*roles)

    async def _check(user: CurrentUser, db: DB) -> User:
        _enforce(db, user, Scope.of(ScopeType.system, SYSTEM_SCOPE_ID), roles=roles)
        return user

    return _check


def require_system_admin():
    return require_role(RoleName.system_admin, scope_type=ScopeType.system)


SystemAdmin = Annotated[User, Depends(require_system_admin())]
