"""Pytest configuration and fixtures."""

import os

# Rate limits and the Redis profile cache are exercised by dedicated tests only
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("CACHE_ENABLED", "false")

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from link4coders.database import Base, get_db  # noqa: E402
from link4coders.main import app  # noqa: E402
from link4coders.models.user import User  # noqa: E402
from link4coders.services.templates import sync_template_catalog  # noqa: E402


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").rsplit("/", 1)[0] + "/link4coders_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# The template catalog is reference data shared by every test
PRESERVED_TABLES = {"templates"}


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema and template catalog once per session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        sync_template_catalog(session)
    finally:
        session.close()
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        if table.name not in PRESERVED_TABLES:
            session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function", autouse=True)
def preview_queue():
    """Keep link mutations from reaching the Celery broker."""
    with patch("link4coders.tasks.previews.fetch_link_preview.delay") as mock_delay:
        yield mock_delay


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_user(client, email: str, profile_slug: str | None = None) -> AuthHeaders:
    """Register a user and return auth headers for them."""
    payload = {"email": email, "password": "testpass123", "full_name": "Test User"}
    if profile_slug:
        payload["profile_slug"] = profile_slug

    response = client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201
    data = response.json()
    token = data["access_token"]
    user_id = data["user"]["id"]

    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user_id, email=email)


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register_user(client, "test@example.com", profile_slug="testuser")


@pytest.fixture
def other_auth_headers(client):
    """Create a second, unrelated user."""
    return register_user(client, "other@example.com", profile_slug="otheruser")


@pytest.fixture
def make_premium(db):
    """Return a helper that upgrades a user to premium."""

    def _make_premium(user_id: int) -> None:
        user = db.query(User).filter(User.id == user_id).first()
        user.is_premium = True
        db.commit()

    return _make_premium
