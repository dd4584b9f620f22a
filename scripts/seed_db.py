"""Seed the role catalog and a dev system administrator.

Run from the project root:
    uv run python scripts/seed_db.py

Safe to run repeatedly: roles are refreshed in place and the admin user is
only created when missing.
"""

import sys
from pathlib import Path

# Ensure the api src is on the path when running standalone
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "apps" / "api" / "src"))

from conducky.core.config import settings  # noqa: E402
from conducky.core.security import hash_password  # noqa: E402
from conducky.db.base import Base  # noqa: E402
from conducky.db.models import User  # noqa: E402
from conducky.db.session import SessionLocal, engine  # noqa: E402
from conducky.domain.enums import SYSTEM_SCOPE_ID, RoleName, ScopeType  # noqa: E402
from conducky.services import role_assignment_service as assignments  # noqa: E402
from conducky.services.role_catalog import seed_roles  # noqa: E402

DEV_ADMIN_EMAIL = "admin@dev.local"


def seed() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        created = seed_roles(db)
        print(f"Roles seeded ({created} new)")

        user = db.query(User).filter_by(email=DEV_ADMIN_EMAIL).first()
        if user is not None:
            print(f"User '{user.email}' already exists. Skipping.")
            return

        user = User(
            email=DEV_ADMIN_EMAIL,
            name="Dev Admin",
            hashed_password=hash_password("password123"),
        )
        db.add(user)
        db.flush()

        assignments.grant(db, user.id, RoleName.system_admin, ScopeType.system, SYSTEM_SCOPE_ID)
        db.commit()
        print(f"Seeded user='{user.email}' (id={user.id}) with role=system_admin")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print(f"DATABASE_URL = {settings.DATABASE_URL}")
    seed()
    print("Done.")
