"""Security utilities for password hashing and JWT tokens."""

import logging
from datetime import datetime, timedelta, timezone

from bcrypt import checkpw, gensalt, hashpw
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from backend.config import DURATION_PATTERN, settings
from backend.models.user import UserRole

logger = logging.getLogger(__name__)

_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


class TokenPayload(BaseModel):
    """Identity carried by an access token."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    role: UserRole
    exp: int


def parse_duration(value: str) -> timedelta:
    """Convert a duration string such as ``"24h"`` or ``"3600"`` to a timedelta.

    Args:
        value: Number of seconds, optionally suffixed with s, m, h or d

    Returns:
        The duration as a timedelta

    Raises:
        ValueError: If the string is not a recognised duration
    """
    match = DURATION_PATTERN.match(value.lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash
        rounds: bcrypt work factor. Defaults to the configured BCRYPT_ROUNDS

    Returns:
        Hashed password as a string

    Example:
        ```python
        from backend.core.security import hash_password

        hashed = hash_password("My_password1!")
        ```
    """
    salt = gensalt(rounds=rounds or settings.bcrypt_rounds)
    return hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash.

    A malformed hash never raises; it simply does not match.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.debug("Password hash could not be parsed")
        return False


def create_access_token(
    user_id: int, role: UserRole, expires_delta: timedelta | None = None
) -> str:
    """Create a JWT access token carrying the user's id and role.

    Args:
        user_id: Id of the authenticated user
        role: Role of the user at issuance time
        expires_delta: Optional custom lifetime. If not provided, uses JWT_EXPIRES_IN

    Returns:
        Encoded JWT token string

    Example:
        ```python
        from backend.core.security import create_access_token

        token = create_access_token(user.id, user.user_role)
        ```
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = parse_duration(settings.jwt_expires_in)

    to_encode = {
        "userId": user_id,
        "role": UserRole(role).value,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenPayload | None:
    """Decode and verify a JWT access token.

    Bad signatures, expired tokens and malformed tokens or claims all yield
    ``None`` so callers cannot tell them apart.

    Args:
        token: JWT token string to decode

    Returns:
        The token's identity claims, or None if the token is invalid
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        logger.debug("Rejected expired access token")
        return None
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None

    try:
        return TokenPayload.model_validate(payload)
    except ValidationError:
        logger.debug("Rejected access token with malformed claims")
        return None
