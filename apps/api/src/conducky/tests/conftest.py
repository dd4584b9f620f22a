import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import conducky.db.models  # noqa: F401
from conducky.core.rate_limit import limiter
from conducky.core.security import create_access_token, hash_password
from conducky.db.base import Base
from conducky.db.models.event import Event
from conducky.db.models.organization import Organization
from conducky.db.models.user import User
from conducky.db.session import get_db
from conducky.domain.enums import SYSTEM_SCOPE_ID, RoleName, ScopeType
from conducky.main import app
from conducky.services import role_assignment_service as assignments
from conducky.services.role_catalog import role_catalog, seed_roles

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(autouse=True)
def db():
    Base.metadata.create_all(bind=engine)
    session = TestSession()
    seed_roles(session)
    limiter.reset()
    app.dependency_overrides[get_db] = lambda: session
    yield session
    session.close()
    app.dependency_overrides.clear()
    role_catalog.invalidate()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def other_session(db):
    """A second session on the same database, standing in for a concurrent request."""
    session = TestSession()
    yield session
    session.close()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def make_user(db):
    def _make(email: str, name: str | None = None, password: str = "password123") -> User:
        user = User(
            id=uuid.uuid4(),
            email=email,
            name=name,
            hashed_password=hash_password(password),
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def grant(db):
    """Grant a role directly through the store and commit."""

    def _grant(user: User, role: str, scope_type: ScopeType, scope_id) -> None:
        assignments.grant(db, user.id, role, scope_type, scope_id)
        db.commit()

    return _grant


@pytest.fixture()
def headers_for():
    def _headers(user: User) -> dict:
        token = create_access_token(subject=str(user.id))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def org(db):
    org = Organization(id=uuid.uuid4(), name="Test Org", slug="test-org")
    db.add(org)
    db.commit()
    return org


@pytest.fixture()
def event(db, org):
    event = Event(id=uuid.uuid4(), name="Test Conf", slug="test-conf", organization_id=org.id)
    db.add(event)
    db.commit()
    return event


@pytest.fixture()
def standalone_event(db):
    event = Event(id=uuid.uuid4(), name="Solo Meetup", slug="solo-meetup")
    db.add(event)
    db.commit()
    return event


@pytest.fixture()
def system_admin(make_user, grant):
    user = make_user("admin@test.local", "Test Admin")
    grant(user, RoleName.system_admin, ScopeType.system, SYSTEM_SCOPE_ID)
    return user


@pytest.fixture()
def auth_header(system_admin, headers_for):
    return headers_for(system_admin)
