"""Database models package."""

from backend.models.rating import Rating
from backend.models.store import Store
from backend.models.user import User, UserRole

__all__ = ["User", "UserRole", "Store", "Rating"]
