"""Shared pytest fixtures for testing."""
import os

os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.core.security import create_access_token, generate_session_id, hash_password  # noqa: E402
from app.main import app  # noqa: E402
from app.models.admin_user import ROLE_ADMIN, ROLE_EDITOR, AdminUser  # noqa: E402
from app.models.analytics_event import AnalyticsEvent  # noqa: E402
from app.models.invitation import Invitation  # noqa: E402
from app.utils.dates import utcnow  # noqa: E402

ADMIN_PASSWORD = "admin123"
EDITOR_PASSWORD = "editor-pass-1"


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """Test client whose requests each get their own session on the test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_user(db_session, username, email, password, role, is_active=True):
    user = AdminUser(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return _create_user(db_session, "admin", "admin@fiesta.mx", ADMIN_PASSWORD, ROLE_ADMIN)


@pytest.fixture
def editor_user(db_session):
    return _create_user(db_session, "editor", "editor@fiesta.mx", EDITOR_PASSWORD, ROLE_EDITOR)


@pytest.fixture
def create_user(db_session):
    def _factory(username, email=None, password="password123", role=ROLE_EDITOR, is_active=True):
        return _create_user(db_session, username, email or f"{username}@fiesta.mx", password, role, is_active)

    return _factory


def make_token(user, expires_in=timedelta(hours=1)):
    now = utcnow()
    return create_access_token(
        user_id=user.id,
        username=user.username,
        role=user.role,
        session_id=generate_session_id(),
        expires_at=(now + expires_in).replace(tzinfo=timezone.utc),
    )


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {make_token(admin_user)}"}


@pytest.fixture
def editor_headers(editor_user):
    return {"Authorization": f"Bearer {make_token(editor_user)}"}


@pytest.fixture
def create_invitation(db_session):
    def _factory(slug, name="Ana", lastname="López", **fields):
        invitation = Invitation(slug=slug, name=name, lastname=lastname, **fields)
        db_session.add(invitation)
        db_session.commit()
        db_session.refresh(invitation)
        return invitation

    return _factory


@pytest.fixture
def create_event(db_session):
    def _factory(event_type, invitation=None, data=None, timestamp=None):
        event = AnalyticsEvent(
            event_type=event_type,
            invitation_id=invitation.id if invitation is not None else None,
            event_data=data,
            ip_address="203.0.113.7",
            user_agent="pytest",
            timestamp=timestamp or utcnow(),
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _factory
