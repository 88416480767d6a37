"""Schemas for the admin dashboard and user/store management."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from backend.models.user import UserRole
from backend.schemas.auth import UserRegister, check_email_length

PAGE_LIMIT = 100


class AdminStats(BaseModel):
    """System-wide counts. The average is formatted to two decimals."""

    totalUsers: int
    totalStores: int
    totalRatings: int
    averageRating: str


class AdminStatsResponse(BaseModel):
    success: bool = True
    data: AdminStats


class AdminUserCreate(UserRegister):
    """Admin user creation request: registration rules plus an optional role."""

    role: UserRole = UserRole.NORMAL_USER


class AdminUser(BaseModel):
    id: int
    name: str
    email: str
    address: str | None
    role: UserRole
    created_at: str


class AdminUsersData(BaseModel):
    users: list[AdminUser]
    total: int
    page: int = 1
    limit: int = PAGE_LIMIT
    totalPages: int = 1


class AdminUsersResponse(BaseModel):
    success: bool = True
    data: AdminUsersData


class AdminUserResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: AdminUser


class StoreCreate(BaseModel):
    """Store creation request schema."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    address: str = Field(min_length=1, max_length=400)
    owner_id: int = Field(ge=1)

    @field_validator("name", "address", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        return check_email_length(v)


class AdminStore(BaseModel):
    id: int
    name: str
    email: str
    address: str
    owner_id: int | None
    owner_name: str | None
    created_at: str
    average_rating: float
    total_ratings: int


class AdminStoresData(BaseModel):
    stores: list[AdminStore]
    total: int
    page: int = 1
    limit: int = PAGE_LIMIT
    totalPages: int = 1


class AdminStoresResponse(BaseModel):
    success: bool = True
    data: AdminStoresData


class AdminStoreResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: AdminStore
