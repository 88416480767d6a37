"""Database connection and session management."""

from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine suited to the database backend in ``database_url``.

    SQLite (used for local development and tests) shares a single connection
    across threads; every other backend gets a connection pool.
    """
    kwargs: dict[str, Any] = {"echo": False}  # Set to True for SQL query logging in development
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True  # Verify connections before using
        kwargs["pool_size"] = 10  # Number of connections to maintain
        kwargs["max_overflow"] = 20  # Maximum number of connections beyond pool_size
    return create_engine(database_url, **kwargs)


engine = build_engine(settings.database_url)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Base class for declarative models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session.

    Yields:
        Session: SQLAlchemy database session

    Example:
        ```python
        from backend.database import get_db

        @router.get("/stores")
        def get_stores(db: Session = Depends(get_db)):
            return db.query(Store).all()
        ```
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
