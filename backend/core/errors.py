"""Application error taxonomy.

Each error carries its HTTP status and a deliberately generic message. The
handlers in ``backend.main`` render them as ``{"success": false, "message": ...}``.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors raised by the API."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(status_code=self.status_code, detail=message or self.message)


class BadRequestError(AppError):
    pass


class UserExistsError(AppError):
    message = "User with this email already exists"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class NoTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "No token provided"


class InvalidTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid token"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"
