"""Pytest fixtures and configuration for BasicTodo tests."""

import os

# Keep the app's own engine off the filesystem during tests.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import datetime, timezone
from zoneinfo import ZoneInfo
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from basictodo.database.database import Base
from basictodo.database.repository import TaskRepository
from basictodo.integrations.openai_client import OpenAIClient, ModelReply


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def other_user_id():
    """A second user whose data must stay invisible to the test user."""
    return "other-user-456"


@pytest.fixture(scope="function")
def db_session(test_user_id, other_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates the two test users (which creates their default preferences).
    """
    from basictodo.database.models import UserDB

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    for user_id, email in ((test_user_id, "test@example.com"), (other_user_id, "other@example.com")):
        session.add(UserDB(id=user_id, email=email, name="Test User", created_at=now, updated_at=now))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def task_repository(db_session: Session, test_user_id):
    """TaskRepository bound to the test user."""
    return TaskRepository(db_session, test_user_id)


@pytest.fixture
def other_task_repository(db_session: Session, other_user_id):
    """TaskRepository bound to the other user."""
    return TaskRepository(db_session, other_user_id)


@pytest.fixture
def fixed_now():
    """Monday 2025-01-20 15:00 UTC (10:00 in New York)."""
    return datetime(2025, 1, 20, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def new_york():
    return ZoneInfo("America/New_York")


@pytest.fixture
def model_client():
    """Mocked model client. Tests set ``complete.return_value`` or ``side_effect``."""
    client = MagicMock(spec=OpenAIClient)
    client.complete.return_value = ModelReply(content="Here you go.")
    return client


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from basictodo.models.user import User
    now = datetime.now(timezone.utc)
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def test_client(db_session: Session, test_user, model_client):
    """Create a FastAPI test client with overridden database, authentication and model client."""
    from basictodo.api.app import app, get_model_client
    from basictodo.database.database import get_db
    from basictodo.auth.dependencies import get_current_user

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    # Override authentication to return test user
    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_model_client] = lambda: model_client

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(db_session: Session, model_client):
    """FastAPI test client with real bearer-token authentication."""
    from basictodo.api.app import app, get_model_client
    from basictodo.database.database import get_db

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_model_client] = lambda: model_client

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
