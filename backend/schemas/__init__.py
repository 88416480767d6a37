"""Pydantic schemas package."""

from backend.schemas.auth import AuthResponse, TokenResponse, UserLogin, UserRegister, UserResponse

__all__ = [
    "AuthResponse",
    "TokenResponse",
    "UserLogin",
    "UserRegister",
    "UserResponse",
]
