"""Authentication router."""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.config import settings
from backend.core.dependencies import get_bearer_token, get_current_user, get_token_payload
from backend.core.errors import InvalidCredentialsError, UserExistsError
from backend.core.security import (
    TokenPayload,
    create_access_token,
    hash_password,
    parse_duration,
    verify_password,
)
from backend.database import get_db
from backend.models.user import User, UserRole
from backend.schemas.auth import (
    AuthData,
    AuthResponse,
    TokenData,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Register a new user with the normal_user role.

    Args:
        user_data: Registration data (name, email, password, address)
        db: Database session

    Returns:
        AuthResponse: Created user and an access token

    Raises:
        UserExistsError: If the email is already registered
    """
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise UserExistsError()

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        password=hash_password(user_data.password),
        address=user_data.address,
        role=UserRole.NORMAL_USER.value,
        created_at=datetime.now(timezone.utc),
    )

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise UserExistsError()
    db.refresh(new_user)

    logger.info(f"Registered user {new_user.id}")

    return AuthResponse(
        message="User registered successfully",
        data=AuthData(
            user=UserResponse.from_user(new_user),
            token=create_access_token(new_user.id, UserRole.NORMAL_USER),
        ),
    )


@router.post("/login", response_model=AuthResponse, status_code=status.HTTP_200_OK)
def login(
    user_data: UserLogin,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Authenticate user and return an access token.

    Unknown email and wrong password produce the same error.

    Args:
        user_data: User login data (email, password)
        db: Database session

    Returns:
        AuthResponse: User information and access token

    Raises:
        InvalidCredentialsError: If email or password is invalid
    """
    user = db.query(User).filter(User.email == user_data.email).first()
    if not user or not verify_password(user_data.password, user.password):
        logger.warning("Failed login attempt")
        raise InvalidCredentialsError()

    return AuthResponse(
        message="Login successful",
        data=AuthData(
            user=UserResponse.from_user(user),
            token=create_access_token(user.id, user.user_role),
        ),
    )


@router.get("/verify", response_model=AuthResponse, status_code=status.HTTP_200_OK)
def verify(
    token: Annotated[str, Depends(get_bearer_token)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> AuthResponse:
    """Check a bearer token and return the current user record with the same token.

    Raises:
        NoTokenError: If the Authorization header is missing or malformed
        InvalidTokenError: If the token is invalid, expired or its user is gone
    """
    return AuthResponse(
        data=AuthData(user=UserResponse.from_user(current_user), token=token),
    )


@router.post("/refresh", response_model=TokenResponse, status_code=status.HTTP_200_OK)
def refresh(
    payload: Annotated[TokenPayload, Depends(get_token_payload)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> TokenResponse:
    """Issue a new token with the same identity claims and a fresh expiry.

    Like verify, the token's user must still exist.

    Raises:
        NoTokenError: If the Authorization header is missing or malformed
        InvalidTokenError: If the token is invalid, expired or its user is gone
    """
    now = datetime.now(timezone.utc)
    # The new expiry must land at least one whole second after the old one
    expires_delta = max(
        parse_duration(settings.jwt_expires_in),
        datetime.fromtimestamp(payload.exp + 1, timezone.utc) - now,
    )
    new_token = create_access_token(payload.user_id, payload.role, expires_delta=expires_delta)
    logger.info(f"Refreshed token for user {current_user.id}")
    return TokenResponse(data=TokenData(token=new_token))
