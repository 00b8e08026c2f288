"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
import tempfile
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["ADMIN_EMAIL"] = "admin@test.com"
os.environ["ADMIN_PASSWORD"] = "TestAdmin123!"
os.environ["NTFY_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="loyola-uploads-")

from authentication.auth import create_access_token, get_password_hash  # noqa: E402
from helpers.time_utils import to_db_datetime, utc_now  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# bcrypt is slow; every fixture user shares one hash
TEST_PASSWORD = "password123"
_TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(
    db_session,
    email: str,
    first_name: str = "Ana",
    last_name: str = "López",
    role: db_models.UserRole = db_models.UserRole.STUDENT,
    verified: bool = True,
    blocked: bool = False,
) -> db_models.User:
    user = db_models.User(
        email=email,
        hashed_password=_TEST_PASSWORD_HASH,
        first_name=first_name,
        last_name=last_name,
        role=role,
        verified=verified,
        blocked=blocked,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def headers_for(user: db_models.User) -> dict:
    token = create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_factory(db_session):
    """Factory fixture creating users with the shared test password."""

    def _user_factory(email: str, **kwargs) -> db_models.User:
        return make_user(db_session, email, **kwargs)

    return _user_factory


@pytest.fixture
def test_user(db_session) -> db_models.User:
    """A verified student."""
    return make_user(db_session, "ana@loyola.edu.mx", "Ana", "López")


@pytest.fixture
def other_user(db_session) -> db_models.User:
    """A second verified student (for permission tests)."""
    return make_user(db_session, "bruno@loyola.edu.mx", "Bruno", "Díaz")


@pytest.fixture
def teacher_user(db_session) -> db_models.User:
    return make_user(
        db_session,
        "maestra@loyola.edu.mx",
        "Carmen",
        "Ruiz",
        role=db_models.UserRole.TEACHER,
    )


@pytest.fixture
def admin_user(db_session) -> db_models.User:
    return make_user(
        db_session,
        "admin@loyola.edu.mx",
        "Admin",
        "Loyola",
        role=db_models.UserRole.ADMIN,
    )


@pytest.fixture
def unverified_user(db_session) -> db_models.User:
    return make_user(db_session, "nuevo@loyola.edu.mx", "Nuevo", "Alumno", verified=False)


@pytest.fixture
def blocked_user(db_session) -> db_models.User:
    return make_user(db_session, "bloqueado@loyola.edu.mx", "Beto", "Mora", blocked=True)


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Get authentication headers for test user."""
    return headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    return headers_for(other_user)


@pytest.fixture
def teacher_auth_headers(teacher_user) -> dict:
    return headers_for(teacher_user)


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    """Get authentication headers for admin user."""
    return headers_for(admin_user)


@pytest.fixture
def unverified_auth_headers(unverified_user) -> dict:
    return headers_for(unverified_user)


@pytest.fixture
def blocked_auth_headers(blocked_user) -> dict:
    return headers_for(blocked_user)


@pytest.fixture
def make_event(db_session):
    """Factory fixture inserting an event directly, bypassing validation and fan-out."""

    def _make_event(
        host: db_models.User,
        starts_in: timedelta = timedelta(hours=1),
        duration: timedelta = timedelta(hours=1),
        max_participants: int | None = None,
        title: str = "Asesoría de álgebra",
        subject: str | None = "Matemáticas",
    ) -> db_models.Event:
        start = utc_now() + starts_in
        event = db_models.Event(
            title=title,
            host_id=host.id,
            subject=subject,
            start_time=to_db_datetime(start),
            end_time=to_db_datetime(start + duration),
            max_participants=max_participants,
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture
def test_post(db_session, test_user) -> db_models.Post:
    """A main-feed post by test_user."""
    post = db_models.Post(author_id=test_user.id, content="¿Alguien tiene la guía de física?")
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture
def test_group(db_session, test_user) -> db_models.Group:
    """A course created by test_user, who is its group admin."""
    group = db_models.Group(
        name="3°B Matemáticas",
        type=db_models.GroupType.COURSE,
        created_by=test_user.id,
    )
    db_session.add(group)
    db_session.flush()
    db_session.add(
        db_models.GroupMember(
            group_id=group.id,
            user_id=test_user.id,
            role=db_models.GroupMemberRole.ADMIN,
        )
    )
    db_session.commit()
    db_session.refresh(group)
    return group
