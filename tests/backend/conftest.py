"""Pytest fixtures for backend tests."""

import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator

# Settings are read at import time, so test defaults must be in place first.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

import backend.models  # noqa: F401
from backend.core.security import create_access_token, hash_password
from backend.database import Base, build_engine, get_db
from backend.main import app
from backend.models.rating import Rating
from backend.models.store import Store
from backend.models.user import User, UserRole

DEFAULT_PASSWORD = "Password1!"


@pytest.fixture(scope="function")
def test_db_engine():
    """Create a database engine for testing.

    Uses TEST_DATABASE_URL when set, otherwise a private in-memory SQLite database.
    """
    test_db_url = os.getenv("TEST_DATABASE_URL", "sqlite://")

    engine = build_engine(test_db_url)

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Cleanup: drop all tables
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """Create a database session for testing with automatic rollback."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine,
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        # Rollback any uncommitted changes to clean up test data
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def test_client(test_db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override."""

    def override_get_db() -> Generator[Session, None, None]:
        """Override get_db dependency to use test database session."""
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    client = TestClient(app)

    try:
        yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def create_user(test_db_session: Session) -> Callable:
    """Factory function to create users directly in the database.

    Returns:
        Function that creates a user with given parameters and returns (user, token)

    Example:
        ```python
        def test_example(create_user):
            owner, token = create_user(email="owner@example.com", role=UserRole.STORE_OWNER)
            # Use token for authenticated requests
        ```
    """

    def _create_user(
        email: str,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User With Long Name",
        role: UserRole = UserRole.NORMAL_USER,
        address: str | None = "221B Baker Street",
    ) -> tuple[User, str]:
        user = User(
            name=name,
            email=email,
            password=hash_password(password),
            address=address,
            role=role.value,
            created_at=datetime.now(timezone.utc),
        )
        test_db_session.add(user)
        test_db_session.commit()
        test_db_session.refresh(user)

        token = create_access_token(user.id, role)

        return user, token

    return _create_user


@pytest.fixture(scope="function")
def create_store(test_db_session: Session) -> Callable:
    """Factory function to create stores. ``age_minutes`` back-dates created_at."""

    def _create_store(
        owner: User | None,
        name: str = "Corner Store",
        email: str = "store@example.com",
        address: str = "1 Market Street",
        age_minutes: int = 0,
    ) -> Store:
        store = Store(
            name=name,
            email=email,
            address=address,
            owner_id=owner.id if owner else None,
            created_at=datetime.now(timezone.utc) - timedelta(minutes=age_minutes),
        )
        test_db_session.add(store)
        test_db_session.commit()
        test_db_session.refresh(store)
        return store

    return _create_store


@pytest.fixture(scope="function")
def create_rating(test_db_session: Session) -> Callable:
    """Factory function to create ratings. ``age_minutes`` back-dates created_at."""

    def _create_rating(
        user: User,
        store: Store,
        rating: int,
        review: str | None = None,
        age_minutes: int = 0,
    ) -> Rating:
        timestamp = datetime.now(timezone.utc) - timedelta(minutes=age_minutes)
        entry = Rating(
            user_id=user.id,
            store_id=store.id,
            rating=rating,
            review=review,
            created_at=timestamp,
            updated_at=timestamp,
        )
        test_db_session.add(entry)
        test_db_session.commit()
        test_db_session.refresh(entry)
        return entry

    return _create_rating


@pytest.fixture(scope="function")
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Build an Authorization header for a token."""

    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
