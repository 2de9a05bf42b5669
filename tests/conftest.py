"""Pytest fixtures and configuration for userapi tests."""

import os

# Cheap bcrypt cost for tests; must be set before userapi.auth.passwords is imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from userapi.auth.passwords import hash_password
from userapi.database.database import Base, get_db
from userapi.database.memory_repository import InMemoryUserRepository
from userapi.database.user_repository import UserRepository
from userapi.jobs.queue import SyncJobQueue
from userapi.services.user_service import UserService


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

TEST_PASSWORD = "password123"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from userapi.database import models  # noqa: F401

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def user_repository(db_session: Session):
    """Create a SQLAlchemy UserRepository instance for testing."""
    return UserRepository(db_session)


@pytest.fixture
def memory_repository():
    """Create an InMemoryUserRepository instance for testing."""
    return InMemoryUserRepository()


@pytest.fixture(scope="session")
def hashed_test_password():
    """One bcrypt hash of TEST_PASSWORD, reused when seeding many users."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def notifier():
    """Notification sender double that reports success."""
    sender = MagicMock()
    sender.send.return_value = True
    return sender


@pytest.fixture
def job_queue():
    """Queue that runs jobs inline so their effects are visible immediately."""
    return SyncJobQueue()


@pytest.fixture
def user_service(memory_repository, job_queue, notifier):
    """UserService over the in-memory store."""
    return UserService(memory_repository, job_queue, notifier)


@pytest.fixture
def seed_users(hashed_test_password):
    """Return a helper that stores `count` users directly through a repository."""
    def _seed(repository, count: int, prefix: str = "user"):
        return [
            repository.create({
                "name": f"{prefix.title()} {i}",
                "email": f"{prefix}{i}@example.com",
                "password": hashed_test_password,
            })
            for i in range(1, count + 1)
        ]
    return _seed


@pytest.fixture
def app(db_session: Session, notifier):
    """Application wired to the test database, an inline job queue and a mock notifier."""
    from userapi.api.app import create_app

    application = create_app(job_queue=SyncJobQueue(), notifier=notifier, init_database=False)

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def test_client(app):
    """Create a FastAPI test client."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def valid_user_payload():
    """Request body for a valid POST /api/users."""
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "password": TEST_PASSWORD,
        "password_confirmation": TEST_PASSWORD,
    }
