import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from conducky.core.errors import ConflictError
from conducky.core.security import hash_password, verify_password
from conducky.db.models.user import User
from conducky.domain.enums import SYSTEM_SCOPE_ID, AuditAction, RoleName, ScopeType
from conducky.services import role_assignment_service as assignments
from conducky.services.audit_service import log_audit

logger = logging.getLogger(__name__)

# Transaction-scoped advisory lock taken around the first-user check.
FIRST_USER_LOCK_KEY = 0x636F6E64


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Return the user if email+password are valid, otherwise None.

    Both outcomes are written to the audit log.
    """
    user = db.query(User).filter(User.email == email).first()
    if user is None or not verify_password(password, user.hashed_password) or not user.is_active:
        log_audit(db, action=AuditAction.login_failed, target_type="User", target_id=email)
        db.commit()
        logger.info("login failed for %s", email)
        return None

    log_audit(
        db,
        action=AuditAction.login_successful,
        target_type="User",
        target_id=user.id,
        user_id=user.id,
    )
    db.commit()
    return user


def _lock_first_user_check(db: Session) -> None:
    """Serialize concurrent registrations so only one can see an empty users table.

    SQLite already serializes writers; Postgres needs the advisory lock.
    """
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": FIRST_USER_LOCK_KEY})


def register_user(db: Session, *, email: str, password: str, name: str | None = None) -> User:
    """Create a user. The very first user becomes system_admin."""
    _lock_first_user_check(db)
    if db.query(User).filter(User.email == email).first() is not None:
        raise ConflictError("Email already registered")

    first_user = db.query(User).count() == 0
    user = User(email=email, name=name, hashed_password=hash_password(password))
    db.add(user)
    db.flush()

    if first_user:
        assignments.grant(db, user.id, RoleName.system_admin, ScopeType.system, SYSTEM_SCOPE_ID)
        logger.info("first user %s granted system_admin", user.id)

    log_audit(
        db,
        action=AuditAction.user_registered,
        target_type="User",
        target_id=user.id,
        user_id=user.id,
    )
    db.commit()
    db.refresh(user)
    return user
