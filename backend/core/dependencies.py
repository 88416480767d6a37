"""FastAPI dependencies for authentication and role-based authorization."""

import logging
from typing import Annotated, Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from backend.core.errors import ForbiddenError, InvalidTokenError, NoTokenError
from backend.core.security import TokenPayload, decode_access_token
from backend.database import get_db
from backend.models.user import User, UserRole

logger = logging.getLogger(__name__)

# auto_error=False: a missing or non-Bearer header becomes NoTokenError.
bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Extract the raw token from an ``Authorization: Bearer <token>`` header.

    Raises:
        NoTokenError: If the header is absent or malformed
    """
    if credentials is None:
        raise NoTokenError()
    return credentials.credentials


def get_token_payload(
    request: Request,
    token: Annotated[str, Depends(get_bearer_token)],
) -> TokenPayload:
    """Verify the bearer token's signature and expiry.

    Raises:
        InvalidTokenError: If the token is invalid or expired
    """
    payload = decode_access_token(token)
    if payload is None:
        logger.warning(f"Invalid token presented for {request.method} {request.url.path}")
        raise InvalidTokenError()
    return payload


def get_current_user(
    payload: Annotated[TokenPayload, Depends(get_token_payload)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Resolve the user a valid token belongs to.

    The user must still exist and still hold the role the token was issued for.

    Raises:
        InvalidTokenError: If no such user exists
    """
    user = db.query(User).filter(User.id == payload.user_id).first()
    if user is None or user.user_role is not payload.role:
        logger.warning(f"Token for user {payload.user_id} no longer matches a user record")
        raise InvalidTokenError()
    return user


def require_role(role: UserRole) -> Callable[..., TokenPayload]:
    """Build a dependency that only admits tokens issued for ``role``.

    The check uses the token's role claim, so it rejects callers before the
    guarded route touches the database.

    Args:
        role: Role required to access the guarded routes

    Returns:
        A FastAPI dependency returning the verified token payload

    Example:
        ```python
        router = APIRouter(dependencies=[Depends(require_role(UserRole.STORE_OWNER))])
        ```
    """

    def _require_role(
        request: Request,
        payload: Annotated[TokenPayload, Depends(get_token_payload)],
    ) -> TokenPayload:
        if payload.role is not role:
            logger.warning(
                f"Access denied for user {payload.user_id} with role {payload.role.value} "
                f"to {request.method} {request.url.path}"
            )
            raise ForbiddenError()
        return payload

    return _require_role


require_store_owner = require_role(UserRole.STORE_OWNER)
