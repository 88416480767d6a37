"""Authentication schemas."""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from backend.models.user import UserRole

NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$")
PASSWORD_UPPERCASE = re.compile(r"[A-Z]")
PASSWORD_SPECIAL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")
PASSWORD_ALLOWED = re.compile(r"^[A-Za-z\d!@#$%^&*(),.?\":{}|<>]+$")


def check_name(v: str) -> str:
    """Names are 20 to 60 letters and spaces."""
    if not 20 <= len(v) <= 60:
        raise ValueError("Name must be between 20 and 60 characters")
    if not NAME_PATTERN.match(v):
        raise ValueError("Name can only contain letters and spaces")
    return v


def check_password(v: str) -> str:
    """Passwords are 8 to 16 characters with an uppercase letter and a special character."""
    if not 8 <= len(v) <= 16:
        raise ValueError("Password must be between 8 and 16 characters")
    if not PASSWORD_UPPERCASE.search(v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not PASSWORD_SPECIAL.search(v):
        raise ValueError("Password must contain at least one special character")
    if not PASSWORD_ALLOWED.match(v):
        raise ValueError("Password contains invalid characters")
    return v


def check_email_length(v: str) -> str:
    if len(v) > 255:
        raise ValueError("Email cannot exceed 255 characters")
    return v


def strip_or_none(v: str | None) -> str | None:
    """Strip whitespace, mapping blank strings to None."""
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class UserRegister(BaseModel):
    """User registration request schema."""

    name: str
    email: EmailStr
    password: str
    address: str | None = Field(default=None, max_length=400)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Normalize name by stripping whitespace."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        return check_email_length(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password(v)

    @field_validator("address", mode="before")
    @classmethod
    def normalize_address(cls, v: str | None) -> str | None:
        return strip_or_none(v)


class UserLogin(BaseModel):
    """User login request schema."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=16)


class UserResponse(BaseModel):
    """User response schema. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    address: str | None
    role: UserRole
    created_at: str | None = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        """Build the public view of a User row."""
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            address=user.address,
            role=user.role,
            created_at=user.created_at.isoformat() if user.created_at else None,
        )


class AuthData(BaseModel):
    user: UserResponse
    token: str


class AuthResponse(BaseModel):
    """Register, login and verify response: the user and a bearer token."""

    success: bool = True
    message: str | None = None
    data: AuthData


class TokenData(BaseModel):
    token: str


class TokenResponse(BaseModel):
    """Refresh response carrying only the new token."""

    success: bool = True
    data: TokenData
