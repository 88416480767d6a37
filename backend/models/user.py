"""User model."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from backend.database import Base


class UserRole(str, enum.Enum):
    """Roles a user can hold. Assigned at creation and never changed by the API."""

    NORMAL_USER = "normal_user"
    STORE_OWNER = "store_owner"
    ADMIN = "admin"


class User(Base):
    """User model for authentication and authorization."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(60), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    role = Column(String(50), default=UserRole.NORMAL_USER.value, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def user_role(self) -> UserRole:
        return UserRole(self.role)

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
